"""
Circle Kernel - rotating savings circle engine

A state machine and accounting core for digital ROSCAs with:
- Round-robin payouts, exactly one per cycle
- Escrow conservation against the token transfer collaborator
- Penalty and reputation tracking for missed or late deposits
- Atomic operations (no partial commits)
- Hash-chained event trail per circle
"""

__version__ = "0.1.0"
