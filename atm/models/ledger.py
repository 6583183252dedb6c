"""Ledger data model: every account plus the account-numbering counter."""

from dataclasses import dataclass, field
from typing import Iterator

from .account import Account

FIRST_ACCOUNT_NO = 100100
MAX_ACCOUNTS = 200
HISTORY_SIZE = 10


@dataclass
class Ledger:
    """In-memory collection of accounts, persisted as one unit."""

    accounts: dict[int, Account] = field(default_factory=dict)
    next_account_no: int = FIRST_ACCOUNT_NO
    max_accounts: int = MAX_ACCOUNTS
    history_size: int = HISTORY_SIZE

    def find(self, account_no: int) -> Account | None:
        """
        Find an account by account number.

        Args:
            account_no: The account number to search for

        Returns:
            Account object if found, None otherwise
        """
        return self.accounts.get(account_no)

    def is_full(self) -> bool:
        return len(self.accounts) >= self.max_accounts

    def issue_account_no(self) -> int:
        """Hand out the next account number and advance the counter."""
        account_no = self.next_account_no
        self.next_account_no += 1
        return account_no

    def add(self, account: Account) -> None:
        if account.account_no in self.accounts:
            raise ValueError(f"Account {account.account_no} already exists")
        self.accounts[account.account_no] = account

    def __len__(self) -> int:
        return len(self.accounts)

    def __iter__(self) -> Iterator[Account]:
        return iter(self.accounts.values())
