"""Bank service for business logic layer."""

import logging
import math

from atm.models.account import Account
from atm.models.exceptions import (
    AccountNotFoundError,
    CapacityExceededError,
    IncorrectPinError,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidPinError,
    RecipientNotFoundError,
)
from atm.models.ledger import Ledger
from atm.models.transaction import Transaction, TransactionType
from atm.models.transaction_log import TransactionLog
from atm.repositories.ledger_repo import PIN_MAX, PIN_MIN, LedgerRepository

logger = logging.getLogger(__name__)

NAME_MAX_BYTES = 63


class BankService:
    """Service layer for ATM operations on a single ledger."""

    def __init__(
        self,
        ledger: Ledger,
        ledger_repo: LedgerRepository,
        name_max_bytes: int = NAME_MAX_BYTES,
    ):
        """
        Initialize the BankService with a ledger and its repository.

        Args:
            ledger: The ledger this service operates on
            ledger_repo: Repository the ledger is saved to after each mutation
            name_max_bytes: Maximum UTF-8 length of an account name (default: 63)
        """
        self._ledger = ledger
        self._ledger_repo = ledger_repo
        self._name_max_bytes = name_max_bytes

    @classmethod
    def from_repository(cls, ledger_repo: LedgerRepository, **kwargs) -> "BankService":
        """Create a service over the ledger currently stored by the repository."""
        return cls(ledger_repo.load(), ledger_repo, **kwargs)

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    def _persist(self) -> None:
        # StorageError propagates; the in-memory change is kept.
        self._ledger_repo.save(self._ledger)

    def _resolve(self, account: Account) -> Account:
        """
        Return the ledger's own record for an account handle.

        Raises:
            AccountNotFoundError: If the handle does not belong to this ledger
        """
        found = self._ledger.find(account.account_no)
        if found is None:
            raise AccountNotFoundError(f"Account {account.account_no} not found")
        return found

    def _truncate_name(self, name: str) -> str:
        raw = name.encode("utf-8")[: self._name_max_bytes]
        return raw.decode("utf-8", errors="ignore")

    def _validate_amount(self, amount: float, action: str) -> None:
        if not math.isfinite(amount):
            raise InvalidAmountError(f"{action} amount must be a finite number, got {amount}")
        if amount <= 0:
            raise InvalidAmountError(f"{action} amount must be greater than zero, got {amount}")

    def _validate_pin(self, pin: int) -> None:
        if not PIN_MIN <= pin <= PIN_MAX:
            raise InvalidPinError(f"PIN must be between {PIN_MIN} and {PIN_MAX}")

    def open_account(self, name: str, pin: int, initial_deposit: float) -> Account:
        """
        Open a new account.

        The initial deposit is recorded as a DEPOSIT transaction and is not
        validated: zero and negative amounts are accepted. A negative PIN is
        stored as its absolute value.

        Args:
            name: The account holder's name (truncated to the name limit)
            pin: The numeric PIN
            initial_deposit: Opening balance

        Returns:
            The created Account

        Raises:
            CapacityExceededError: If the ledger is full
            InvalidPinError: If the PIN is too large to store
            StorageError: If the ledger could not be saved (account is kept)
        """
        if self._ledger.is_full():
            logger.warning("Account creation refused: ledger holds %d accounts", len(self._ledger))
            raise CapacityExceededError(
                f"Reached maximum account limit of {self._ledger.max_accounts}"
            )

        pin = abs(pin)
        self._validate_pin(pin)

        balance = float(initial_deposit)
        account = Account(
            account_no=self._ledger.issue_account_no(),
            name=self._truncate_name(name),
            pin=pin,
            balance=balance,
            transactions=TransactionLog(self._ledger.history_size),
        )
        account.transactions.append(Transaction.record(TransactionType.DEPOSIT, balance))
        self._ledger.add(account)
        logger.info("Opened account %d with balance %.2f", account.account_no, balance)

        self._persist()
        return account

    def authenticate(self, account_no: int, pin: int) -> Account:
        """
        Look up an account and check its PIN.

        Args:
            account_no: The account number
            pin: The PIN to check

        Returns:
            The matching Account

        Raises:
            AccountNotFoundError: If no account has this number
            IncorrectPinError: If the PIN does not match
        """
        account = self._ledger.find(account_no)
        if account is None:
            logger.warning("Login failed: account %d not found", account_no)
            raise AccountNotFoundError(f"Account {account_no} not found")
        if not account.check_pin(pin):
            logger.warning("Login failed: incorrect PIN for account %d", account_no)
            raise IncorrectPinError(f"Incorrect PIN for account {account_no}")
        return account

    def get_balance(self, account: Account) -> float:
        return self._resolve(account).balance

    def deposit(self, account: Account, amount: float) -> float:
        """
        Deposit funds into an account.

        Args:
            account: The account to deposit to
            amount: The amount to deposit (must be positive)

        Returns:
            The new balance

        Raises:
            InvalidAmountError: If the amount is zero, negative or not finite
            StorageError: If the ledger could not be saved (deposit is kept)
        """
        account = self._resolve(account)
        self._validate_amount(amount, "Deposit")

        account.balance += amount
        account.transactions.append(Transaction.record(TransactionType.DEPOSIT, amount))
        logger.info("Deposited %.2f to account %d", amount, account.account_no)

        self._persist()
        return account.balance

    def withdraw(self, account: Account, amount: float) -> float:
        """
        Withdraw funds from an account.

        Args:
            account: The account to withdraw from
            amount: The amount to withdraw (must be positive)

        Returns:
            The new balance

        Raises:
            InvalidAmountError: If the amount is zero, negative or not finite
            InsufficientBalanceError: If the amount exceeds the balance
            StorageError: If the ledger could not be saved (withdrawal is kept)
        """
        account = self._resolve(account)
        self._validate_amount(amount, "Withdrawal")
        if amount > account.balance:
            logger.warning("Withdrawal of %.2f refused for account %d", amount, account.account_no)
            raise InsufficientBalanceError(
                f"Insufficient balance: {account.balance:.2f} available, {amount:.2f} requested"
            )

        account.balance -= amount
        account.transactions.append(Transaction.record(TransactionType.WITHDRAW, amount))
        logger.info("Withdrew %.2f from account %d", amount, account.account_no)

        self._persist()
        return account.balance

    def transfer(self, account: Account, to_account_no: int, amount: float) -> float:
        """
        Transfer funds to another account.

        Both balance changes and both history entries are applied before a
        single save of the ledger.

        Args:
            account: The sending account
            to_account_no: The receiving account number
            amount: The amount to transfer (must be positive)

        Returns:
            The sender's new balance

        Raises:
            RecipientNotFoundError: If the receiving account doesn't exist
            InvalidAmountError: If the amount is zero, negative or not finite
            InsufficientBalanceError: If the sender has insufficient balance
            StorageError: If the ledger could not be saved (transfer is kept)
        """
        sender = self._resolve(account)
        receiver = self._ledger.find(to_account_no)
        if receiver is None:
            logger.warning("Transfer refused: recipient %d not found", to_account_no)
            raise RecipientNotFoundError(f"Recipient account {to_account_no} not found")

        self._validate_amount(amount, "Transfer")
        if amount > sender.balance:
            logger.warning("Transfer of %.2f refused for account %d", amount, sender.account_no)
            raise InsufficientBalanceError(
                f"Insufficient balance: {sender.balance:.2f} available, {amount:.2f} requested"
            )

        sender.balance -= amount
        receiver.balance += amount
        sender.transactions.append(
            Transaction.record(TransactionType.TRANSFER_OUT, amount, receiver.account_no)
        )
        receiver.transactions.append(
            Transaction.record(TransactionType.TRANSFER_IN, amount, sender.account_no)
        )
        logger.info(
            "Transferred %.2f from account %d to account %d",
            amount,
            sender.account_no,
            receiver.account_no,
        )

        self._persist()
        return sender.balance

    def change_pin(self, account: Account, new_pin: int) -> None:
        """
        Replace an account's PIN.

        Raises:
            InvalidPinError: If the PIN is too large to store
            StorageError: If the ledger could not be saved (new PIN is kept)
        """
        account = self._resolve(account)
        self._validate_pin(new_pin)
        account.pin = new_pin
        logger.info("Changed PIN for account %d", account.account_no)
        self._persist()

    def recent_transactions(self, account: Account) -> list[Transaction]:
        """Return the account's bounded history, oldest first."""
        return self._resolve(account).transactions.to_list()
