"""
SQLAlchemy ORM models package.

All models are imported here so that Base.metadata knows every table
before create_all() runs, and so other modules can import from
marketing_ledger.models directly.
"""

from marketing_ledger.models.user import User, UserType  # noqa: F401
from marketing_ledger.models.card import Card  # noqa: F401
from marketing_ledger.models.ad_account import AdAccount, ad_account_cards  # noqa: F401
from marketing_ledger.models.transaction import (  # noqa: F401
    CardTransaction,
    TransactionKind,
    TransactionType,
    KIND_TO_TYPE,
)
