"""Ledger repository for the flat binary data file."""

import logging
import os
import shutil
import struct
import tempfile
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

from atm.models.account import Account
from atm.models.exceptions import StorageError
from atm.models.ledger import FIRST_ACCOUNT_NO, HISTORY_SIZE, MAX_ACCOUNTS, Ledger
from atm.models.transaction import Transaction, TransactionType
from atm.models.transaction_log import TransactionLog

logger = logging.getLogger(__name__)

MAGIC = b"ATMB"
FORMAT_VERSION = 1
NAME_FIELD_BYTES = 64
# range of the i64 PIN field
PIN_MIN = -(2**63)
PIN_MAX = 2**63 - 1

# magic, version, history capacity, account count, next account number
HEADER = struct.Struct("<4sHHiq")
# account number, name, pin, balance, populated history count
ACCOUNT_HEAD = struct.Struct(f"<q{NAME_FIELD_BYTES}sqdi")
# kind code, amount, microseconds since epoch, counterparty
TXN_SLOT = struct.Struct("<Bdqq")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ONE_MICROSECOND = timedelta(microseconds=1)

# 0 marks an unused slot
KIND_CODES = {
    TransactionType.DEPOSIT: 1,
    TransactionType.WITHDRAW: 2,
    TransactionType.TRANSFER_OUT: 3,
    TransactionType.TRANSFER_IN: 4,
}
KINDS_BY_CODE = {code: kind for kind, code in KIND_CODES.items()}


class LedgerFormatError(ValueError):
    """Raised when the data file does not hold a ledger this code can read."""


def _record_size(history_size: int) -> int:
    return ACCOUNT_HEAD.size + history_size * TXN_SLOT.size


def _pack_account(account: Account, history_size: int) -> bytes:
    raw_name = account.name.encode("utf-8")
    if len(raw_name) > NAME_FIELD_BYTES:
        raise LedgerFormatError(f"Name of account {account.account_no} exceeds {NAME_FIELD_BYTES} bytes")
    entries = account.transactions.to_list()[-history_size:]
    parts = [
        ACCOUNT_HEAD.pack(
            account.account_no,
            raw_name,
            account.pin,
            account.balance,
            len(entries),
        )
    ]
    for txn in entries:
        parts.append(
            TXN_SLOT.pack(
                KIND_CODES[txn.type],
                txn.amount,
                (txn.time - EPOCH) // ONE_MICROSECOND,
                txn.counterparty or 0,
            )
        )
    parts.append(bytes(TXN_SLOT.size * (history_size - len(entries))))
    return b"".join(parts)


def _unpack_account(buf: bytes, offset: int, file_history: int, history_size: int) -> Account:
    account_no, raw_name, pin, balance, count = ACCOUNT_HEAD.unpack_from(buf, offset)
    if not 0 <= count <= file_history:
        raise LedgerFormatError(f"Account {account_no} claims {count} history entries")

    log = TransactionLog(history_size)
    slot = offset + ACCOUNT_HEAD.size
    for _ in range(count):
        code, amount, micros, counterparty = TXN_SLOT.unpack_from(buf, slot)
        if code not in KINDS_BY_CODE:
            raise LedgerFormatError(f"Unknown transaction kind code {code}")
        log.append(
            Transaction(
                type=KINDS_BY_CODE[code],
                amount=amount,
                time=EPOCH + micros * ONE_MICROSECOND,
                counterparty=counterparty or None,
            )
        )
        slot += TXN_SLOT.size

    return Account(
        account_no=account_no,
        name=raw_name.rstrip(b"\0").decode("utf-8"),
        pin=pin,
        balance=balance,
        transactions=log,
    )


def encode_ledger(ledger: Ledger) -> bytes:
    """Serialize the whole ledger into the on-disk layout."""
    history_size = ledger.history_size
    parts = [
        HEADER.pack(MAGIC, FORMAT_VERSION, history_size, len(ledger), ledger.next_account_no)
    ]
    parts.extend(_pack_account(account, history_size) for account in ledger)
    return b"".join(parts)


def decode_ledger(
    buf: bytes,
    max_accounts: int = MAX_ACCOUNTS,
    history_size: int = HISTORY_SIZE,
) -> Ledger:
    """
    Parse a ledger written by encode_ledger.

    Histories stored with a different capacity are re-bounded to
    ``history_size``, keeping the newest entries.

    Raises:
        LedgerFormatError: If the buffer is truncated or not a ledger file
    """
    if len(buf) < HEADER.size:
        raise LedgerFormatError("File is shorter than the ledger header")
    magic, version, file_history, count, next_account_no = HEADER.unpack_from(buf, 0)
    if magic != MAGIC:
        raise LedgerFormatError("Missing ledger file signature")
    if version != FORMAT_VERSION:
        raise LedgerFormatError(f"Unsupported ledger format version {version}")
    if count < 0 or file_history < 1:
        raise LedgerFormatError("Corrupt ledger header")

    record_size = _record_size(file_history)
    expected = HEADER.size + count * record_size
    if len(buf) != expected:
        raise LedgerFormatError(f"Expected {expected} bytes, found {len(buf)}")

    ledger = Ledger(
        next_account_no=next_account_no,
        max_accounts=max_accounts,
        history_size=history_size,
    )
    try:
        for i in range(count):
            ledger.add(_unpack_account(buf, HEADER.size + i * record_size, file_history, history_size))
    except LedgerFormatError:
        raise
    except UnicodeDecodeError as err:
        raise LedgerFormatError(f"Account name is not valid UTF-8: {err}") from err
    except OverflowError as err:
        # timestamp outside the datetime range
        raise LedgerFormatError(f"Transaction time out of range: {err}") from err
    except ValueError as err:
        # duplicate account numbers
        raise LedgerFormatError(str(err)) from err

    if len(ledger) and ledger.next_account_no <= max(ledger.accounts):
        # a counter behind the stored accounts would hand out a used number
        ledger.next_account_no = max(ledger.accounts) + 1
    return ledger


class LedgerRepository:
    """Repository for loading and saving the whole ledger as one snapshot."""

    def __init__(
        self,
        path: str | os.PathLike,
        max_accounts: int = MAX_ACCOUNTS,
        first_account_no: int = FIRST_ACCOUNT_NO,
        history_size: int = HISTORY_SIZE,
    ):
        """
        Initialize the repository with the data file location.

        Args:
            path: Path of the ledger data file
            max_accounts: Account capacity given to loaded ledgers
            first_account_no: Counter value for a brand new ledger
            history_size: Transaction history capacity per account
        """
        self._path = Path(path)
        self._max_accounts = max_accounts
        self._first_account_no = first_account_no
        self._history_size = history_size

    @property
    def path(self) -> Path:
        return self._path

    def empty_ledger(self) -> Ledger:
        return Ledger(
            next_account_no=self._first_account_no,
            max_accounts=self._max_accounts,
            history_size=self._history_size,
        )

    def load(self) -> Ledger:
        """
        Load the ledger from disk.

        A missing or unreadable file yields an empty ledger instead of an
        error, so the first run starts from a clean slate.

        Returns:
            The loaded Ledger
        """
        try:
            buf = self._path.read_bytes()
        except FileNotFoundError:
            logger.info("No ledger file at %s, starting empty", self._path)
            return self.empty_ledger()
        except OSError as err:
            logger.warning("Cannot read ledger file %s (%s), starting empty", self._path, err)
            return self.empty_ledger()

        try:
            ledger = decode_ledger(buf, self._max_accounts, self._history_size)
        except LedgerFormatError as err:
            logger.warning("Ignoring unreadable ledger file %s: %s", self._path, err)
            return self.empty_ledger()

        logger.info(
            "Loaded %d accounts from %s (next account %d)",
            len(ledger),
            self._path,
            ledger.next_account_no,
        )
        return ledger

    def save(self, ledger: Ledger) -> None:
        """
        Rewrite the data file with a full snapshot of the ledger.

        The snapshot goes to a temporary file in the same directory which then
        replaces the data file, so a crash never leaves a truncated file.

        Raises:
            StorageError: If the snapshot cannot be encoded or written
        """
        try:
            data = encode_ledger(ledger)
        except (struct.error, UnicodeEncodeError, LedgerFormatError) as err:
            logger.error("Cannot encode ledger: %s", err)
            raise StorageError(f"Cannot encode ledger: {err}") from err

        directory = self._path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=self._path.name + ".", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self._path)
        except OSError as err:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.error("Failed to save ledger to %s: %s", self._path, err)
            raise StorageError(f"Failed to save ledger to {self._path}: {err}") from err

        logger.debug("Saved %d accounts to %s", len(ledger), self._path)

    def backup(self, dest_dir: str | os.PathLike, today: date | None = None) -> Path:
        """
        Copy the data file into a backup directory with a date suffix.

        Args:
            dest_dir: Directory receiving the copy (created if missing)
            today: Date used for the suffix (default: today)

        Returns:
            Path of the backup copy

        Raises:
            StorageError: If there is no data file or the copy fails
        """
        today = today or date.today()
        dest_dir = Path(dest_dir)
        dest = dest_dir / f"{self._path.stem}{today.strftime('_%m_%d_%Y')}{self._path.suffix}"
        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(self._path, dest)
        except FileNotFoundError as err:
            raise StorageError(f"Ledger file {self._path} does not exist") from err
        except OSError as err:
            raise StorageError(f"Failed to back up {self._path}: {err}") from err
        logger.info("Backed up %s to %s", self._path, dest)
        return dest
