"""
CardTransaction model — the append-only log of balance movements.

A row exists if and only if its effect is currently applied to the card
balances. Rows are created only by the four ledger operations and removed
only by reversal; "deleting" a transaction means undoing it.

Kinds and their fixed type:
  - cold_to_real      (revenue): a card moves cold funds into real funds
  - from_card_cold    (revenue): another card's cold funds become this card's real funds
  - spend_ad_account  (expense): real funds are spent on an ad account
  - real_to_cold      (expense): real funds go back to cold

Key fields:
  - card_id: the card whose real balance changed (the target card)
  - source_card_id: only set for from_card_cold
  - ad_account_id: only set for spend_ad_account. Deliberately NOT a
    foreign key, so deleting an ad account never cascades into the log
  - amount_cents: always positive; direction comes from the kind
  - transaction_date: business date chosen by the user (defaults to today)

Only note and transaction_date may be edited after creation.
"""

import enum
from datetime import date, datetime, timezone

from sqlalchemy import BigInteger, String, Integer, Date, DateTime, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from marketing_ledger.database import Base


class TransactionType(str, enum.Enum):
    REVENUE = "revenue"
    EXPENSE = "expense"


class TransactionKind(str, enum.Enum):
    """
    The closed set of balance movements.

    Inherits from str so the value serializes naturally to JSON and is
    stored as a plain string.
    """
    COLD_TO_REAL = "cold_to_real"
    FROM_CARD_COLD = "from_card_cold"
    SPEND_AD_ACCOUNT = "spend_ad_account"
    REAL_TO_COLD = "real_to_cold"


KIND_TO_TYPE = {
    TransactionKind.COLD_TO_REAL: TransactionType.REVENUE,
    TransactionKind.FROM_CARD_COLD: TransactionType.REVENUE,
    TransactionKind.SPEND_AD_ACCOUNT: TransactionType.EXPENSE,
    TransactionKind.REAL_TO_COLD: TransactionType.EXPENSE,
}


def _today() -> date:
    return datetime.now(timezone.utc).date()


class CardTransaction(Base):
    __tablename__ = "marketing_transactions"

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_marketing_transactions_positive_amount"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    type: Mapped[TransactionType] = mapped_column(
        Enum(TransactionType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    kind: Mapped[TransactionKind] = mapped_column(
        Enum(TransactionKind, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True,
    )

    # Target card (the one whose real balance moved)
    card_id: Mapped[int] = mapped_column(
        ForeignKey("marketing_cards.id"),
        nullable=False,
        index=True,
    )

    # Donor card for from_card_cold
    source_card_id: Mapped[int | None] = mapped_column(
        ForeignKey("marketing_cards.id"),
        nullable=True,
        index=True,
    )

    # Ad account for spend_ad_account (no FK, see module docstring)
    ad_account_id: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        index=True,
    )

    amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)

    note: Mapped[str | None] = mapped_column(String(500), nullable=True)

    transaction_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        default=_today,
        index=True,
    )

    # Actor who applied the transaction
    created_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
