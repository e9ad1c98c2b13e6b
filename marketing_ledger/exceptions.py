"""
Custom exception classes and the FastAPI exception handler.

The service layer raises these domain errors without importing any HTTP
concepts. A single handler registered on the app translates them into a
consistent JSON body: {"detail": ..., "error_type": ..., **extra}.

Each class declares its HTTP status and a stable machine-readable
error_type as class attributes, so adding an error is one small class.

Exception hierarchy:
    LedgerError (base)
    ├── NotFoundError (404)
    │   ├── CardNotFoundError
    │   ├── AdAccountNotFoundError
    │   ├── TransactionNotFoundError
    │   └── CardLinkNotFoundError
    ├── InvalidInputError (422)
    │   ├── InvalidAmountError
    │   └── InvalidOperationError
    ├── InvariantViolationError (422)
    │   ├── InsufficientColdBalanceError
    │   ├── InsufficientSourceColdBalanceError
    │   ├── InsufficientRealBalanceError
    │   ├── InsufficientDotationError
    │   ├── DotationUnderflowError
    │   └── DotationLimitBelowUsageError
    ├── ReversalConflictError (409)
    ├── UnsupportedKindError (500)
    ├── ConflictError (409)
    │   ├── DuplicateCardNameError
    │   ├── DuplicateAdAccountNameError
    │   ├── DuplicateCardLinkError
    │   ├── CardInUseError
    │   └── DuplicateEmailError
    └── InvalidCredentialsError (401)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class LedgerError(Exception):
    """Base exception for all marketing ledger domain errors."""

    status_code: int = 400
    error_type: str = "ledger_error"

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)

    def extra(self) -> dict:
        """Additional fields merged into the JSON error body."""
        return {}


# ---------------------------------------------------------------------------
# Not found (404)
# ---------------------------------------------------------------------------

class NotFoundError(LedgerError):
    status_code = 404
    error_type = "not_found"


class CardNotFoundError(NotFoundError):
    """Raised when a referenced card does not exist."""

    error_type = "card_not_found"

    def __init__(self, card_id: int):
        self.card_id = card_id
        super().__init__(f"Card {card_id} not found")


class AdAccountNotFoundError(NotFoundError):
    """Raised when a referenced ad account does not exist."""

    error_type = "ad_account_not_found"

    def __init__(self, ad_account_id: int):
        self.ad_account_id = ad_account_id
        super().__init__(f"Ad account {ad_account_id} not found")


class TransactionNotFoundError(NotFoundError):
    error_type = "transaction_not_found"

    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} not found")


class CardLinkNotFoundError(NotFoundError):
    error_type = "card_link_not_found"

    def __init__(self, ad_account_id: int, card_id: int):
        self.ad_account_id = ad_account_id
        self.card_id = card_id
        super().__init__(
            f"Card {card_id} is not linked to ad account {ad_account_id}"
        )


# ---------------------------------------------------------------------------
# Invalid input (422)
# ---------------------------------------------------------------------------

class InvalidInputError(LedgerError):
    status_code = 422
    error_type = "invalid_input"


class InvalidAmountError(InvalidInputError):
    """Raised when an amount is non-numeric, non-finite or not positive."""

    error_type = "invalid_amount"

    def __init__(self, detail: str = "Amount must be a positive number"):
        super().__init__(detail)


class InvalidOperationError(InvalidInputError):
    """Raised when an operation is structurally invalid (e.g. same source and target)."""

    error_type = "invalid_operation"


# ---------------------------------------------------------------------------
# Balance invariant violations (422)
# ---------------------------------------------------------------------------

class InvariantViolationError(LedgerError):
    """
    Base for rejections caused by a card's current balances.

    Attributes:
        card_id: The card whose balance blocked the operation.
        requested_cents: The amount the caller tried to move.
        available_cents: The headroom the card actually had.
    """

    status_code = 422
    error_type = "invariant_violation"
    label = "balance"

    def __init__(self, card_id: int, requested_cents: int, available_cents: int):
        self.card_id = card_id
        self.requested_cents = requested_cents
        self.available_cents = available_cents
        super().__init__(self.describe())

    def describe(self) -> str:
        return (
            f"Insufficient {self.label} on card {self.card_id}: requested "
            f"{self.requested_cents} cents, available {self.available_cents} cents"
        )

    def extra(self) -> dict:
        return {
            "card_id": self.card_id,
            "requested_cents": self.requested_cents,
            "available_cents": self.available_cents,
        }


class InsufficientColdBalanceError(InvariantViolationError):
    error_type = "insufficient_cold_balance"
    label = "cold balance"


class InsufficientSourceColdBalanceError(InvariantViolationError):
    error_type = "insufficient_source_cold_balance"
    label = "source cold balance"


class InsufficientRealBalanceError(InvariantViolationError):
    error_type = "insufficient_real_balance"
    label = "real balance"


class InsufficientDotationError(InvariantViolationError):
    """Raised when dotation_used + amount would exceed dotation_limit."""

    error_type = "insufficient_dotation"
    label = "dotation"


class DotationUnderflowError(InvariantViolationError):
    """Raised when dotation_used - amount would go below zero."""

    error_type = "dotation_underflow"
    label = "dotation used"


class DotationLimitBelowUsageError(InvariantViolationError):
    """Raised when an admin lowers dotation_limit below dotation_used."""

    error_type = "dotation_limit_below_usage"

    def describe(self) -> str:
        return (
            f"Dotation limit {self.requested_cents} cents is below the "
            f"{self.available_cents} cents already used on card {self.card_id}"
        )


# ---------------------------------------------------------------------------
# Reversal (409 / 500)
# ---------------------------------------------------------------------------

class ReversalConflictError(LedgerError):
    """
    Raised when undoing a transaction would break a balance invariant.

    The transaction row is kept and no balance changes, so the caller can
    fix the card state (e.g. reverse later transactions first) and retry.
    """

    status_code = 409
    error_type = "reversal_conflict"

    def __init__(self, transaction_id: int, reason: str):
        self.transaction_id = transaction_id
        self.reason = reason
        super().__init__(f"Cannot reverse transaction {transaction_id}: {reason}")

    def extra(self) -> dict:
        return {"transaction_id": self.transaction_id, "reason": self.reason}


class UnsupportedKindError(LedgerError):
    status_code = 500
    error_type = "unsupported_kind"

    def __init__(self, kind):
        self.kind = kind
        super().__init__(f"Unsupported transaction kind: {kind}")


# ---------------------------------------------------------------------------
# Conflicts (409)
# ---------------------------------------------------------------------------

class ConflictError(LedgerError):
    status_code = 409
    error_type = "conflict"


class DuplicateCardNameError(ConflictError):
    error_type = "duplicate_card_name"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"A card named '{name}' already exists")


class DuplicateAdAccountNameError(ConflictError):
    error_type = "duplicate_ad_account_name"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"An ad account named '{name}' already exists")


class DuplicateCardLinkError(ConflictError):
    error_type = "duplicate_card_link"

    def __init__(self, ad_account_id: int, card_id: int):
        self.ad_account_id = ad_account_id
        self.card_id = card_id
        super().__init__(
            f"Card {card_id} is already linked to ad account {ad_account_id}"
        )


class CardInUseError(ConflictError):
    """Raised when deleting a card that transactions still reference."""

    error_type = "card_in_use"

    def __init__(self, card_id: int, transaction_count: int):
        self.card_id = card_id
        self.transaction_count = transaction_count
        super().__init__(
            f"Card {card_id} is referenced by {transaction_count} "
            f"transaction(s); reverse them before deleting the card"
        )

    def extra(self) -> dict:
        return {"transaction_count": self.transaction_count}


class DuplicateEmailError(ConflictError):
    """Raised when attempting to register with an email that's already in use."""

    error_type = "duplicate_email"

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email {email} is already registered")


# ---------------------------------------------------------------------------
# Authentication (401)
# ---------------------------------------------------------------------------

class InvalidCredentialsError(LedgerError):
    """Raised when login credentials are incorrect."""

    status_code = 401
    error_type = "invalid_credentials"

    def __init__(self):
        super().__init__("Invalid email or password")


# ---------------------------------------------------------------------------
# FastAPI exception handler
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register the domain error handler with the FastAPI application.

    Every LedgerError subclass is rendered the same way, using the
    status_code and error_type declared on its class. Server-side errors
    are logged at ERROR, client errors at WARNING.

    This is called once during app startup in main.py.
    """

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "%s %s -> %s: %s",
            request.method,
            request.url.path,
            exc.error_type,
            exc.detail,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "error_type": exc.error_type,
                **exc.extra(),
            },
        )
