"""Data models for the ATM ledger."""

from .account import Account
from .ledger import Ledger
from .transaction import Transaction, TransactionType
from .transaction_log import TransactionLog
from .exceptions import (
    BankError,
    AccountNotFoundError,
    RecipientNotFoundError,
    IncorrectPinError,
    InvalidPinError,
    InsufficientBalanceError,
    InvalidAmountError,
    CapacityExceededError,
    StorageError,
    InvalidInputError,
)

__all__ = [
    "Account",
    "Ledger",
    "Transaction",
    "TransactionType",
    "TransactionLog",
    "BankError",
    "AccountNotFoundError",
    "RecipientNotFoundError",
    "IncorrectPinError",
    "InvalidPinError",
    "InsufficientBalanceError",
    "InvalidAmountError",
    "CapacityExceededError",
    "StorageError",
    "InvalidInputError",
]
