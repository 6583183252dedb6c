"""Transaction data model."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class TransactionType(str, Enum):
    """Kinds of balance-affecting events."""

    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"
    TRANSFER_OUT = "TRANSFER_OUT"
    TRANSFER_IN = "TRANSFER_IN"


@dataclass(frozen=True)
class Transaction:
    """Represents one recorded balance change on an account."""

    type: TransactionType
    amount: float
    time: datetime
    counterparty: int | None = None

    @classmethod
    def record(
        cls,
        type: TransactionType,
        amount: float,
        counterparty: int | None = None,
    ) -> "Transaction":
        """
        Create a transaction stamped with the current UTC time.

        Args:
            type: The kind of transaction
            amount: The transaction amount
            counterparty: The other account number for transfers, None otherwise

        Returns:
            A new immutable Transaction
        """
        return cls(
            type=type,
            amount=amount,
            time=datetime.now(timezone.utc),
            counterparty=counterparty,
        )
