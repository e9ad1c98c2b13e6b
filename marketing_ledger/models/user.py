"""
User model — the authentication identity behind every ledger action.

The ledger itself only needs an actor id to stamp on transactions; this
model supplies it together with a role:

  - ADMIN: may create, edit and delete cards and ad accounts
  - MEMBER: may read everything and apply or reverse transactions

New signups are always MEMBER. Admins are provisioned by an operator
updating user_type directly in the database.

The password is stored as an Argon2id hash, never in plaintext.
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, Integer, DateTime, Enum
from sqlalchemy.orm import Mapped, mapped_column

from marketing_ledger.database import Base


class UserType(str, enum.Enum):
    ADMIN = "admin"
    MEMBER = "member"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Email is the login identifier
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    # Argon2id hash of the password
    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    user_type: Mapped[UserType] = mapped_column(
        Enum(UserType),
        default=UserType.MEMBER,
        nullable=False,
    )

    # Soft-disable: deactivated users can't log in
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
