"""
AdAccount model — an advertising account that cards pay into.

Ad accounts are linked to cards many-to-many through the
marketing_ad_account_cards association table. Link rows are removed
automatically when either side is deleted.

Transactions reference an ad account by id only (no foreign key), so an
ad account can be deleted without touching the transaction log; a spend
recorded against it stays reversible.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, Integer, String, DateTime, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from marketing_ledger.database import Base


ad_account_cards = Table(
    "marketing_ad_account_cards",
    Base.metadata,
    Column(
        "ad_account_id",
        Integer,
        ForeignKey("marketing_ad_accounts.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "card_id",
        Integer,
        ForeignKey("marketing_cards.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class AdAccount(Base):
    __tablename__ = "marketing_ad_accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

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
    # Link rows are deleted explicitly by the services (SQLite does not
    # enforce ON DELETE CASCADE unless foreign keys are switched on)
    cards: Mapped[list["Card"]] = relationship(
        secondary=ad_account_cards,
        back_populates="ad_accounts",
        order_by="Card.name",
        passive_deletes=True,
    )
