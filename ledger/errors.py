"""
Ledger Exceptions

Every refusal in the engine is one of these. No error is fatal:
the worst outcome is "operation refused, prior snapshot intact".
"""


class LedgerError(Exception):
    """Base exception for ledger operations."""

    code = "ledger_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(LedgerError):
    """Missing field, non-positive amount or similar bad parameter."""

    code = "invalid_input"


class EntityNotFoundError(InvalidInputError):
    """An id that does not exist in the profile."""

    code = "not_found"

    def __init__(self, entity_type: str, entity_id: str):
        super().__init__(f"{entity_type} not found: {entity_id}")
        self.entity_type = entity_type
        self.entity_id = entity_id


class InsufficientFundsError(LedgerError):
    """The change would drive a payment method below zero."""

    code = "insufficient_funds"


class CascadeValidationError(InsufficientFundsError):
    """A deletion's cascaded reverts would leave an invalid ledger."""

    code = "cascade_rejected"


class ReferentialIntegrityError(LedgerError):
    """Deleting something that is still referenced."""

    code = "in_use"
