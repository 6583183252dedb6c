"""Shared fixtures for the ATM test suite."""

import pytest

from atm.models.exceptions import StorageError
from atm.repositories.ledger_repo import LedgerRepository
from atm.services.bank_service import BankService


class FailingLedgerRepository(LedgerRepository):
    """Repository whose saves always fail, for persistence-failure paths."""

    def save(self, ledger):
        raise StorageError("disk full")


@pytest.fixture
def ledger_repo(tmp_path):
    """Create a LedgerRepository writing to a temporary data file."""
    return LedgerRepository(tmp_path / "accounts.dat")


@pytest.fixture
def bank_service(ledger_repo):
    """Create a BankService over an empty ledger."""
    return BankService.from_repository(ledger_repo)


@pytest.fixture
def failing_service(tmp_path):
    """Create a BankService whose ledger can never be saved."""
    return BankService.from_repository(FailingLedgerRepository(tmp_path / "accounts.dat"))
