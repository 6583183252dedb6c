"""Custom exceptions for the ATM ledger."""


class BankError(Exception):
    """Base exception for all banking-related errors."""
    pass


class AccountNotFoundError(BankError):
    """Raised when an account cannot be found."""
    pass


class RecipientNotFoundError(AccountNotFoundError):
    """Raised when the receiving account of a transfer does not exist."""
    pass


class IncorrectPinError(BankError):
    """Raised when the PIN does not match the account's PIN."""
    pass


class InvalidPinError(BankError):
    """Raised when a PIN cannot be stored in the ledger file."""
    pass


class InsufficientBalanceError(BankError):
    """Raised when an account has insufficient balance for a transaction."""
    pass


class InvalidAmountError(BankError):
    """Raised when an invalid amount is provided (e.g., zero or negative amount)."""
    pass


class CapacityExceededError(BankError):
    """Raised when the ledger already holds its maximum number of accounts."""
    pass


class StorageError(BankError):
    """Raised when the ledger file cannot be written or copied."""
    pass


class InvalidInputError(BankError):
    """Raised when the shell cannot parse what the user typed."""
    pass
