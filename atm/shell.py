"""Interactive text menus driving the bank service."""

import logging
import math
import sys
from typing import Callable, TextIO, TypeVar

from tabulate import tabulate

from atm.models.account import Account
from atm.models.exceptions import BankError, InvalidInputError, StorageError
from atm.services.bank_service import BankService

logger = logging.getLogger(__name__)

T = TypeVar('T')

MAIN_MENU = """
==== ATM SIMULATION ====
1) Create new account
2) Login to account
3) Exit"""

SESSION_MENU = """1) Check Balance
2) Withdraw
3) Deposit
4) Transfer
5) Mini-Statement
6) Change PIN
7) Logout"""


def parse_int(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        raise InvalidInputError(f"Not a whole number: {text!r}") from None


def parse_amount(text: str) -> float:
    try:
        value = float(text.strip())
    except ValueError:
        raise InvalidInputError(f"Not a number: {text!r}") from None
    if not math.isfinite(value):
        raise InvalidInputError(f"Not a finite number: {text!r}")
    return value


def format_amount(n: float) -> str:
    return '{:,.2f}'.format(n)


class AtmShell:
    """Main menu and per-account session menu over a BankService."""

    def __init__(self, bank: BankService, stdin: TextIO | None = None, stdout: TextIO | None = None):
        self.bank = bank
        self._in = stdin or sys.stdin
        self._out = stdout or sys.stdout

    def _say(self, msg: str = '') -> None:
        print(msg, file=self._out)

    def _read_line(self, prompt: str) -> str:
        self._out.write(prompt)
        self._out.flush()
        line = self._in.readline()
        if not line:
            raise EOFError
        return line.rstrip('\r\n')

    def _ask(self, prompt: str, parse: Callable[[str], T]) -> T:
        """Prompt until the answer parses."""
        while True:
            try:
                return parse(self._read_line(prompt))
            except InvalidInputError as err:
                logger.debug("Re-prompting: %s", err)
                self._say('Invalid input. Please try again.')

    def run(self) -> None:
        """Serve the main menu until the user exits or input ends."""
        try:
            while True:
                self._say(MAIN_MENU)
                choice = self._ask('Choose: ', parse_int)
                if choice == 1:
                    self.create_account()
                elif choice == 2:
                    account = self.login()
                    if account is not None:
                        self.session(account)
                elif choice == 3:
                    break
                else:
                    self._say('Invalid choice.')
        except EOFError:
            self._say()
        self._say('Goodbye!')

    def create_account(self) -> None:
        name = self._read_line('Enter customer name: ')
        pin = self._ask('Set 4-digit PIN (numbers only): ', parse_int)
        initial = self._ask('Initial deposit amount: ', parse_amount)
        try:
            account = self.bank.open_account(name, pin, initial)
        except StorageError as err:
            self._say(f'Warning: account created but not saved ({err}).')
            account = self.bank.ledger.find(self.bank.ledger.next_account_no - 1)
        except BankError as err:
            self._say(str(err))
            return
        self._say(f'Account created successfully!\nAccount Number: {account.account_no}')

    def login(self) -> Account | None:
        account_no = self._ask('Enter account number: ', parse_int)
        pin = self._ask('Enter PIN: ', parse_int)
        try:
            return self.bank.authenticate(account_no, pin)
        except BankError as err:
            self._say(str(err))
            return None

    def _attempt(self, action: Callable[[], T]) -> T | None:
        """Run one service call, reporting business errors instead of raising."""
        try:
            return action()
        except StorageError as err:
            self._say(f'Warning: change applied but not saved ({err}).')
        except BankError as err:
            self._say(str(err))
        return None

    def session(self, account: Account) -> None:
        while True:
            self._say(f'\nWelcome, {account.name} (Acc {account.account_no})')
            self._say(SESSION_MENU)
            choice = self._ask('Choose: ', parse_int)
            if choice == 1:
                self._say(f'Available balance: {format_amount(self.bank.get_balance(account))}')
            elif choice == 2:
                amount = self._ask('Enter amount to withdraw: ', parse_amount)
                if self._attempt(lambda: self.bank.withdraw(account, amount)) is not None:
                    self._say(f'Withdrawn {format_amount(amount)}. New balance: {format_amount(account.balance)}')
            elif choice == 3:
                amount = self._ask('Enter amount to deposit: ', parse_amount)
                if self._attempt(lambda: self.bank.deposit(account, amount)) is not None:
                    self._say(f'Deposited {format_amount(amount)}. New balance: {format_amount(account.balance)}')
            elif choice == 4:
                to_account_no = self._ask('Enter recipient account number: ', parse_int)
                amount = self._ask('Enter amount to transfer: ', parse_amount)
                if self._attempt(lambda: self.bank.transfer(account, to_account_no, amount)) is not None:
                    self._say(
                        f'Transferred {format_amount(amount)} to {to_account_no}. '
                        f'Your new balance: {format_amount(account.balance)}'
                    )
            elif choice == 5:
                self.mini_statement(account)
            elif choice == 6:
                new_pin = self._ask('Enter new 4-digit PIN: ', parse_int)
                try:
                    self.bank.change_pin(account, new_pin)
                except StorageError as err:
                    self._say(f'Warning: change applied but not saved ({err}).')
                except BankError as err:
                    self._say(str(err))
                else:
                    self._say('PIN changed successfully.')
            elif choice == 7:
                self._say('Logging out...')
                return
            else:
                self._say('Invalid choice.')

    def mini_statement(self, account: Account) -> None:
        self._say(f'Mini-statement for {account.name} (Acc: {account.account_no})')
        self._say('Recent transactions (most recent last):')
        rows = [
            [
                txn.time.astimezone().strftime('%Y-%m-%d %H:%M:%S'),
                txn.type.value,
                format_amount(txn.amount),
                txn.counterparty or '',
            ]
            for txn in self.bank.recent_transactions(account)
        ]
        self._say(tabulate(rows, headers=['Time', 'Type', 'Amount', 'Other Acc'], disable_numparse=True))
