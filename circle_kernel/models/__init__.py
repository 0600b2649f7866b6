"""ORM models for the circle kernel."""

from circle_kernel.models.circle import Circle, CircleMember
from circle_kernel.models.circle_event import CircleAction, CircleEvent

__all__ = [
    "Circle",
    "CircleMember",
    "CircleAction",
    "CircleEvent",
]
