"""Interactive teller session working on the shared account table."""

from __future__ import annotations

import argparse
import sys
from collections import deque
from typing import Callable, TextIO

from .files import log_account_transaction, read_config
from .messaging import send_to_monitor
from .models import Account, Config, Priority
from .storage import AccountTable, TableState


class BankError(Exception):
    """An operation the bank refused."""


class InsufficientFunds(BankError):
    """The account balance does not cover the amount."""


class UnknownAccount(BankError):
    """The account does not exist or may not be used."""


class LimitExceeded(BankError):
    """The amount is above the configured limit."""


class Teller:
    """Operations of one logged-in account."""

    def __init__(
        self,
        table: AccountTable,
        config: Config,
        account: int,
        notify: Callable[[str], object] | None = None,
        log_dir="transacciones",
    ) -> None:
        self.table = table
        self.config = config
        self.account = account
        self.notify = notify if notify is not None else send_to_monitor
        self.log_dir = log_dir

    def _own(self, state: TableState) -> Account:
        index = state.find(self.account)
        if index is None:
            raise UnknownAccount(f"La cuenta {self.account} no existe.")
        return state.accounts[index]

    def deposit(self, amount: float) -> float:
        """Add money to the account and return the new balance."""
        with self.table.transaction() as state:
            account = self._own(state)
            account.balance += amount
            state.buffer.push(account, Priority.HIGH)
            balance = account.balance
        log_account_transaction(self.account, f"Depósito: +{amount:.2f}", self.log_dir)
        self.notify(f"DEPOSITO {self.account} {amount:.2f}")
        return balance

    def withdraw(self, amount: float) -> float:
        """Take money from the account and return the new balance."""
        if amount > self.config.withdrawal_limit:
            raise LimitExceeded(f"Límite de retiro: {self.config.withdrawal_limit}")
        with self.table.transaction() as state:
            account = self._own(state)
            if account.balance < amount:
                raise InsufficientFunds("Saldo insuficiente.")
            account.balance -= amount
            state.buffer.push(account, Priority.HIGH)
            balance = account.balance
        log_account_transaction(self.account, f"Retiro: -{amount:.2f}", self.log_dir)
        self.notify(f"RETIRO {self.account} {amount:.2f}")
        return balance

    def transfer(self, destination: int, amount: float) -> float:
        """Move money to another account and return this account's new balance."""
        if amount > self.config.transfer_limit:
            raise LimitExceeded(
                f"Límite de transferencia: {self.config.transfer_limit}"
            )
        with self.table.transaction() as state:
            source = self._own(state)
            index = state.find(destination)
            if index is None:
                raise UnknownAccount("Cuenta destino no existe.")
            target = state.accounts[index]
            if source.balance < amount:
                raise InsufficientFunds("Saldo insuficiente.")
            source.balance -= amount
            target.balance += amount
            state.buffer.push(source, Priority.HIGH)
            state.buffer.push(target, Priority.HIGH)
            balance = source.balance
        log_account_transaction(
            self.account, f"Transferencia a {destination}: -{amount:.2f}", self.log_dir
        )
        self.notify(f"TRANSFERENCIA {self.account} {destination} {amount:.2f}")
        return balance

    def balance(self) -> float:
        """Return the current balance."""
        with self.table.transaction() as state:
            account = self._own(state)
            state.buffer.push(account, Priority.HIGH)
            return account.balance


def login(table: AccountTable, number: int) -> Account:
    """Return the account if it exists and is not blocked."""
    state = table.snapshot()
    index = state.find(number)
    if index is None or state.accounts[index].blocked:
        raise UnknownAccount("Cuenta no válida o bloqueada.")
    return state.accounts[index]


class _TokenReader:
    """Whitespace-separated tokens read lazily from a text stream."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._pending: deque[str] = deque()

    def next(self) -> str | None:
        while not self._pending:
            line = self._stream.readline()
            if not line:
                return None
            self._pending.extend(line.split())
        return self._pending.popleft()

    def read_int(self) -> int | None:
        token = self.next()
        try:
            return int(token) if token is not None else None
        except ValueError:
            return None

    def read_float(self) -> float | None:
        token = self.next()
        try:
            return float(token) if token is not None else None
        except ValueError:
            return None


def _tokens(stream) -> _TokenReader:
    return stream if isinstance(stream, _TokenReader) else _TokenReader(stream)


_MENU = (
    "\n╔════════════════════════════╗\n"
    "║   CAJERO  |  CUENTA {account:<6d} ║\n"
    "╠════════════════════════════╣\n"
    "║ 1. Depósito                ║\n"
    "║ 2. Retiro                  ║\n"
    "║ 3. Transferencia           ║\n"
    "║ 4. Consultar saldo         ║\n"
    "║ 5. Salir                   ║\n"
    "╚════════════════════════════╝\n"
    "Seleccione: "
)


def run_menu(teller: Teller, input_stream, output) -> None:
    """Run the teller menu until the user leaves or input ends."""
    tokens = _tokens(input_stream)

    def say(text: str, end: str = "\n") -> None:
        print(text, end=end, file=output, flush=True)

    while True:
        say(_MENU.format(account=teller.account), end="")
        option = tokens.read_int()
        if option is None or option == 5:
            return
        try:
            if option == 1:
                say("Monto a depositar: ", end="")
                amount = tokens.read_float()
                if amount is None:
                    return
                teller.deposit(amount)
            elif option == 2:
                say("Monto a retirar: ", end="")
                amount = tokens.read_float()
                if amount is None:
                    return
                teller.withdraw(amount)
            elif option == 3:
                say("Cuenta destino: ", end="")
                destination = tokens.read_int()
                if destination is None:
                    return
                say("Monto a transferir: ", end="")
                amount = tokens.read_float()
                if amount is None:
                    return
                teller.transfer(destination, amount)
            elif option == 4:
                say(f"Saldo actual = {teller.balance():.2f} €")
            else:
                say("Opción inválida.")
        except BankError as exc:
            say(str(exc))


_LOGIN = (
    "\n╔═════════════════════════════╗\n"
    "║ INICIO DE SESIÓN DE USUARIO ║\n"
    "╚═════════════════════════════╝\n"
    "Introduce tu número de cuenta: "
)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Interactive teller session.")
    parser.add_argument("table", help="name of the shared account table")
    parser.add_argument("--config", default="config.txt")
    parser.add_argument("--address", default=None)
    args = parser.parse_args(argv)

    try:
        cfg = read_config(args.config)
    except OSError as exc:
        print(f"{args.config}: {exc}", file=sys.stderr)
        return 1

    table = AccountTable.attach(args.table)
    with table:
        tokens = _TokenReader(sys.stdin)
        while True:
            print(_LOGIN, end="", flush=True)
            number = tokens.read_int()
            if number is None:
                return 0
            try:
                login(table, number)
                break
            except UnknownAccount as exc:
                print(exc)

        teller = Teller(
            table,
            cfg,
            number,
            notify=lambda text: send_to_monitor(text, args.address),
        )
        run_menu(teller, tokens, sys.stdout)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())