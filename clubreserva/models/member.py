"""User and club membership models.

User = a person known to the identity provider (global, can belong to several clubs).
ClubMembership = the link between a user and a club, carrying the user's role there.
"""

import enum

from sqlalchemy import Boolean, Enum, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clubreserva.models.base import Base, TimestampMixin


class ClubRole(enum.StrEnum):
    """Roles within a club."""

    PLAYER = "player"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"


class User(TimestampMixin, Base):
    """A person who can sign in. Global identity, not tied to one club."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(254), unique=True, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    # Relationships
    club_memberships: Mapped[list["ClubMembership"]] = relationship(back_populates="user", lazy="selectin")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<User {self.email}>"


class ClubMembership(TimestampMixin, Base):
    """Links a user to a club with a role. A user may hold several roles in one club."""

    __tablename__ = "club_memberships"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    club_id: Mapped[int] = mapped_column(ForeignKey("clubs.id"), nullable=False)
    role: Mapped[ClubRole] = mapped_column(
        Enum(ClubRole, name="club_role", values_callable=lambda e: [x.value for x in e]),
        default=ClubRole.PLAYER,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    user: Mapped["User"] = relationship(back_populates="club_memberships")

    __table_args__ = (Index("ix_clubmember_user_club_role", "user_id", "club_id", "role", unique=True),)

    def __repr__(self) -> str:
        return f"<ClubMembership user={self.user_id} club={self.club_id} role={self.role}>"
