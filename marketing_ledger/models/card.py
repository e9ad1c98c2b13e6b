"""
Card model — a marketing payment card and its four balance figures.

Each card carries:
  - cold_balance_cents: funds parked on the card, not yet made spendable
  - real_balance_cents: funds available for ad spend
  - dotation_limit_cents: ceiling on how much the card may move in total
  - dotation_used_cents: how much of that ceiling is currently consumed

Balance management:
  The four columns are the source of truth and are only changed by the
  ledger and reversal services, always together with inserting or
  deleting the matching CardTransaction row in the same DB transaction.

  CHECK constraints at the database level enforce the invariants
  (all figures non-negative, used never above limit). The services check
  first and raise domain errors; the constraints are the final safety net.

All amounts are integer cents in 64-bit columns, so 10.50 is stored as 1050.
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, String, Integer, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from marketing_ledger.database import Base


class Card(Base):
    __tablename__ = "marketing_cards"

    __table_args__ = (
        CheckConstraint("cold_balance_cents >= 0", name="ck_marketing_cards_cold_non_negative"),
        CheckConstraint("real_balance_cents >= 0", name="ck_marketing_cards_real_non_negative"),
        CheckConstraint("dotation_limit_cents >= 0", name="ck_marketing_cards_limit_non_negative"),
        CheckConstraint("dotation_used_cents >= 0", name="ck_marketing_cards_used_non_negative"),
        CheckConstraint(
            "dotation_used_cents <= dotation_limit_cents",
            name="ck_marketing_cards_used_within_limit",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Display name, unique across cards (the service compares case-insensitively)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    # Only the last four digits are ever stored, never the full PAN
    last_four_digits: Mapped[str] = mapped_column(String(4), nullable=False)

    dotation_limit_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    dotation_used_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    cold_balance_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    real_balance_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    # Audit timestamps
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

    # --- Relationships ---
    ad_accounts: Mapped[list["AdAccount"]] = relationship(
        secondary="marketing_ad_account_cards",
        back_populates="cards",
        passive_deletes=True,
    )

    # --- Derived figures (never stored) ---
    @property
    def available_dotation_cents(self) -> int:
        return self.dotation_limit_cents - self.dotation_used_cents

    @property
    def total_balance_cents(self) -> int:
        return self.cold_balance_cents + self.real_balance_cents
