"""Account data model."""

from dataclasses import dataclass, field

from .transaction_log import TransactionLog


@dataclass
class Account:
    """Represents a bank account."""

    account_no: int
    name: str
    pin: int
    balance: float
    transactions: TransactionLog = field(default_factory=TransactionLog)

    def check_pin(self, pin: int) -> bool:
        """Return True when the given PIN matches this account's PIN."""
        return self.pin == pin
