"""
Module: circle_kernel.models.circle
Responsibility: ORM persistence for circles (configuration + mutable state)
    and their member slots.
Architecture position: Kernel > Models.  May import from db/ and domain/
    value types only.

Invariants enforced:
    - One Circle row per circle identifier; configuration columns are
      written once at creation and never updated.
    - One CircleMember row per (circle, address) and per (circle, slot_index);
      slot indices are 0..N-1 in the order members were listed.
    - escrow_balance >= 0, current_cycle >= 0, penalties_accrued >= 0
      (CHECK constraints back the service-level checks).

Failure modes:
    - IntegrityError on duplicate member address or slot within a circle.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from circle_kernel.db.base import Base, UUIDString
from circle_kernel.db.types import UTCDateTime
from circle_kernel.domain.bitmap import DepositBitmap
from circle_kernel.domain.policy import CirclePolicy, PayoutPolicy
from circle_kernel.domain.reputation import MemberStanding


class Circle(Base):
    """
    A rotating savings circle.

    Contract:
        Configuration columns (owner .. policy snapshot) are immutable after
        creation.  State columns are mutated only by CircleService.
    """

    __tablename__ = "circles"

    __table_args__ = (
        CheckConstraint("deposit_amount > 0", name="ck_circle_deposit_positive"),
        CheckConstraint("escrow_balance >= 0", name="ck_circle_escrow_non_negative"),
        CheckConstraint("current_cycle >= 0", name="ck_circle_cycle_non_negative"),
        CheckConstraint(
            "next_payout_index >= 0 AND next_payout_index < member_count",
            name="ck_circle_payout_index_range",
        ),
        Index("idx_circle_owner", "owner"),
    )

    # --- configuration ---

    owner: Mapped[str] = mapped_column(String(128), nullable=False)

    token_asset: Mapped[str] = mapped_column(String(128), nullable=False)

    deposit_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    cycle_interval_secs: Mapped[int] = mapped_column(BigInteger, nullable=False)

    join_deadline_secs: Mapped[int] = mapped_column(BigInteger, nullable=False)

    member_count: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    # Policy snapshot frozen at creation
    initial_reputation: Mapped[int] = mapped_column(Integer, nullable=False)
    reputation_reward: Mapped[int] = mapped_column(Integer, nullable=False)
    missed_reputation_penalty: Mapped[int] = mapped_column(Integer, nullable=False)
    late_reputation_penalty: Mapped[int] = mapped_column(Integer, nullable=False)
    reputation_floor: Mapped[int] = mapped_column(Integer, nullable=False)
    missed_fine_bps: Mapped[int] = mapped_column(Integer, nullable=False)
    late_fine_bps: Mapped[int] = mapped_column(Integer, nullable=False)
    payout_policy: Mapped[str] = mapped_column(String(32), nullable=False)

    # --- state ---

    current_cycle: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    next_payout_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    last_execution_time: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    deposits_bitmap: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    escrow_balance: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    is_paused: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Set when the owner closed the join window early
    started_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    members: Mapped[list["CircleMember"]] = relationship(
        back_populates="circle",
        order_by="CircleMember.slot_index",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Circle {self.id}: cycle {self.current_cycle}/{self.member_count}>"

    @property
    def policy(self) -> CirclePolicy:
        return CirclePolicy(
            initial_reputation=self.initial_reputation,
            reputation_reward=self.reputation_reward,
            missed_reputation_penalty=self.missed_reputation_penalty,
            late_reputation_penalty=self.late_reputation_penalty,
            reputation_floor=self.reputation_floor,
            missed_fine_bps=self.missed_fine_bps,
            late_fine_bps=self.late_fine_bps,
            payout_policy=PayoutPolicy(self.payout_policy),
        )

    def apply_policy(self, policy: CirclePolicy) -> None:
        """Freeze ``policy`` into the configuration columns (creation only)."""
        self.initial_reputation = policy.initial_reputation
        self.reputation_reward = policy.reputation_reward
        self.missed_reputation_penalty = policy.missed_reputation_penalty
        self.late_reputation_penalty = policy.late_reputation_penalty
        self.reputation_floor = policy.reputation_floor
        self.missed_fine_bps = policy.missed_fine_bps
        self.late_fine_bps = policy.late_fine_bps
        self.payout_policy = policy.payout_policy.value

    @property
    def bitmap(self) -> DepositBitmap:
        return DepositBitmap(self.member_count, self.deposits_bitmap)

    @property
    def confirmed_slots(self) -> frozenset[int]:
        return frozenset(m.slot_index for m in self.members if m.confirmed)

    def member_by_address(self, address: str) -> "CircleMember | None":
        for member in self.members:
            if member.address == address:
                return member
        return None


class CircleMember(Base):
    """
    One member slot of a circle, with its reputation and penalty standing.

    Contract:
        Rows exist for every listed member from creation on, confirmed or
        not; ``confirmed`` flips once on join_circle.
    """

    __tablename__ = "circle_members"

    __table_args__ = (
        UniqueConstraint("circle_id", "address", name="uq_circle_member_address"),
        UniqueConstraint("circle_id", "slot_index", name="uq_circle_member_slot"),
        CheckConstraint("reputation_score >= 0", name="ck_member_reputation_non_negative"),
        CheckConstraint("penalties_accrued >= 0", name="ck_member_penalties_non_negative"),
    )

    circle_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("circles.id"),
        nullable=False,
    )

    slot_index: Mapped[int] = mapped_column(Integer, nullable=False)

    address: Mapped[str] = mapped_column(String(128), nullable=False)

    confirmed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    joined_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    reputation_score: Mapped[int] = mapped_column(Integer, nullable=False)

    penalties_accrued: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    last_deposit_cycle: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    missed_deposits: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    late_deposits: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    circle: Mapped[Circle] = relationship(back_populates="members")

    def __repr__(self) -> str:
        return f"<CircleMember {self.address} slot {self.slot_index}>"

    @property
    def standing(self) -> MemberStanding:
        return MemberStanding(
            reputation_score=self.reputation_score,
            penalties_accrued=self.penalties_accrued,
            last_deposit_cycle=self.last_deposit_cycle,
            missed_deposits=self.missed_deposits,
            late_deposits=self.late_deposits,
        )

    def apply_standing(self, standing: MemberStanding) -> None:
        self.reputation_score = standing.reputation_score
        self.penalties_accrued = standing.penalties_accrued
        self.last_deposit_cycle = standing.last_deposit_cycle
        self.missed_deposits = standing.missed_deposits
        self.late_deposits = standing.late_deposits
