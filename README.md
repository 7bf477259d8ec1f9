# securebank

A small banking simulation made of cooperating processes on one POSIX machine:

- a **bank** process that loads the accounts file into a shared account
  table, starts a background disk writer, and opens a monitor and several
  teller sessions, each in its own `gnome-terminal` window;
- **teller** sessions where a user logs in with an account number and makes
  deposits, withdrawals, transfers and balance queries;
- a **monitor** that receives every transaction, prints it, appends it to the
  central log and raises alerts on suspicious patterns (repeated withdrawals
  from one account, repeated transfers between the same two accounts).

The account table lives in shared memory and is guarded by a file lock in the
system temporary directory, so every process sees the same balances. Every
teller operation, balance queries included, queues a snapshot of the touched
accounts in a priority buffer inside the table (at most 64 pending entries;
further entries are dropped while it is full). The disk writer drains that
buffer and rewrites only the changed records of the accounts file in place.
When the bank shuts down, it writes the whole table back to disk.

Teller sessions send their transactions to the monitor as short datagrams over
a Unix socket, by default `securebank-monitor.sock` in the system temporary
directory. If no monitor is listening, the message is dropped and a warning is
logged; the operation itself still goes through.

## Installation

```
pip install .
```

Python 3.10 or later on a POSIX system is required. Tests are run with pytest:

```
pip install ".[test]"
pytest
```

## Configuration

Every command reads `config.txt` from the working directory unless given
`--config PATH`. Lines starting with `#` are ignored. Recognised keys:

```
LIMITE_RETIRO=1000
LIMITE_TRANSFERENCIA=2000
UMBRAL_RETIROS=3
UMBRAL_TRANSFERENCIAS=3
NUM_HILOS=2
ARCHIVO_CUENTAS=cuentas.dat
ARCHIVO_LOG=transacciones.log
```

- `LIMITE_RETIRO`, `LIMITE_TRANSFERENCIA`: the largest single withdrawal and
  transfer a teller accepts. A missing key counts as 0, which refuses every
  positive amount.
- `UMBRAL_RETIROS`, `UMBRAL_TRANSFERENCIAS`: how many consecutive withdrawals
  from one account, or repeated transfers between the same two accounts,
  trigger a monitor alert. A deposit resets the withdrawal count of its
  account.
- `NUM_HILOS`: how many teller sessions the bank opens (at most 99).
- `ARCHIVO_CUENTAS`: the binary accounts file, holding up to 100 accounts.
- `ARCHIVO_LOG`: the central transaction log written by the monitor.

## Usage

Create an accounts file with the three sample accounts (default path
`cuentas.dat`, or give another path as the argument):

```
securebank-init
```

Start the bank, which opens the monitor and the teller sessions:

```
securebank
```

Press ENTER in the bank's terminal to stop every session, write the account
table back to disk and release the shared table.

The monitor and a teller session can also be started by hand:

```
securebank-monitor [--config PATH] [--address SOCKET]
securebank-user <table-name> [--config PATH] [--address SOCKET]
```

where `<table-name>` is the name of the shared account table the bank created
and `SOCKET` is the monitor's socket path.

Each teller operation that changes a balance is also recorded in
`transacciones/<account>/transacciones.log`.

## Using the library

The pieces can be used directly from Python:

- `securebank.models`: `Account` (with `pack()` and `Account.unpack()` for the
  binary record), `Priority`, `Config`, `initial_accounts()`.
- `securebank.files`: `read_config`, `load_accounts`, `dump_accounts`,
  `write_account_at`, `timestamp`, `append_log`, `log_account_transaction`.
- `securebank.storage`: `AccountTable` (`create`, `attach`, a `transaction()`
  context manager, `snapshot`, `close`, `unlink`), `TableState`,
  `PriorityBuffer`, `Operation` and the `DiskWriter` thread.
- `securebank.messaging`: `send_to_monitor` and `MonitorInbox`.
- `securebank.monitor`: `FraudDetector`, whose `analyze(message)` applies the
  alert rules to one transaction message and returns the alert text, if any.
- `securebank.user`: `login` and `Teller` with `deposit`, `withdraw`,
  `transfer` and `balance`; failures raise `InsufficientFunds`,
  `UnknownAccount` or `LimitExceeded`, all subclasses of `BankError`.
  `run_menu` drives a `Teller` from any text input and output streams.

## What it does not do

- Logging in takes only an account number; there are no PINs or passwords.
- The bank opens its sessions with `gnome-terminal` only; without it, start
  the monitor and teller sessions by hand as shown above.
- It runs on a single machine; the shared table and the monitor socket are not
  reachable over a network.