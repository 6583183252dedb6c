"""Tests for BankService remaining operations (balance, PIN change, history)."""

import pytest

from atm.models.exceptions import IncorrectPinError, InvalidPinError, StorageError
from atm.models.transaction import TransactionType


def test_get_balance(bank_service):
    account = bank_service.open_account("Alice", 1234, 42.5)

    assert bank_service.get_balance(account) == 42.5


def test_change_pin(bank_service, ledger_repo):
    """New PIN works, old PIN no longer does, and the change is saved."""
    account = bank_service.open_account("Alice", 1234, 0.0)

    bank_service.change_pin(account, 9876)

    assert bank_service.authenticate(account.account_no, 9876) is account
    with pytest.raises(IncorrectPinError):
        bank_service.authenticate(account.account_no, 1234)
    assert ledger_repo.load().find(account.account_no).pin == 9876


def test_change_pin_records_no_transaction(bank_service):
    account = bank_service.open_account("Alice", 1234, 0.0)
    bank_service.change_pin(account, 1)

    assert len(bank_service.recent_transactions(account)) == 1


def test_change_pin_save_failure_keeps_new_pin(failing_service):
    with pytest.raises(StorageError):
        failing_service.open_account("Alice", 1234, 0.0)
    account = failing_service.authenticate(100100, 1234)

    with pytest.raises(StorageError):
        failing_service.change_pin(account, 5555)

    assert account.pin == 5555


def test_recent_transactions_oldest_first(bank_service):
    account = bank_service.open_account("Alice", 1234, 100.0)
    bank_service.deposit(account, 1.0)
    bank_service.withdraw(account, 2.0)

    history = bank_service.recent_transactions(account)
    assert [t.type for t in history] == [
        TransactionType.DEPOSIT,
        TransactionType.DEPOSIT,
        TransactionType.WITHDRAW,
    ]
    assert history[0].time <= history[1].time <= history[2].time


def test_recent_transactions_bounded(bank_service):
    """Only the ten newest transactions are kept."""
    account = bank_service.open_account("Alice", 1234, 0.0)
    for i in range(1, 13):
        bank_service.deposit(account, float(i))

    history = bank_service.recent_transactions(account)
    assert len(history) == 10
    # The opening deposit and the first two deposits were evicted
    assert [t.amount for t in history] == [float(i) for i in range(3, 13)]


def test_recent_transactions_is_read_only_copy(bank_service):
    account = bank_service.open_account("Alice", 1234, 0.0)

    history = bank_service.recent_transactions(account)
    history.clear()

    assert len(bank_service.recent_transactions(account)) == 1


def test_change_pin_too_large(bank_service, ledger_repo):
    """An unstorable PIN is refused and the old PIN keeps working."""
    account = bank_service.open_account("Alice", 1234, 0.0)

    with pytest.raises(InvalidPinError):
        bank_service.change_pin(account, 2**63)

    assert account.pin == 1234
    assert bank_service.authenticate(account.account_no, 1234) is account

    # Later saves still go through
    bank_service.deposit(account, 7.0)
    assert ledger_repo.load().find(account.account_no).balance == 7.0
