"""Main bank process: shares the accounts, starts monitor and user terminals."""

from __future__ import annotations

import argparse
import shlex
import subprocess
import sys
import time

from .files import dump_accounts, load_accounts, read_config
from .storage import AccountTable, DiskWriter

MAX_PROCESSES = 100
LAUNCH_PAUSE = 0.2


def terminal_command(command: str) -> list[str]:
    """Return the argument list that runs a shell command in a new terminal."""
    return ["gnome-terminal", "--", "bash", "-c", command]


def _module_command(module: str, *args: str) -> str:
    return shlex.join([sys.executable, "-m", module, *args])


def _launch(command: str, label: str) -> subprocess.Popen | None:
    try:
        return subprocess.Popen(terminal_command(command))
    except OSError as exc:
        print(f"{label}: {exc}", file=sys.stderr)
        return None


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Run the bank.")
    parser.add_argument("--config", default="config.txt")
    args = parser.parse_args(argv)

    try:
        cfg = read_config(args.config)
        accounts = load_accounts(cfg.accounts_file)
    except OSError as exc:
        print(exc, file=sys.stderr)
        return 1

    table = AccountTable.create(accounts)
    writer = DiskWriter(table, cfg.accounts_file)
    writer.start()
    processes: list[subprocess.Popen] = []
    try:
        monitor = _launch(
            _module_command("securebank.monitor", "--config", args.config), "monitor"
        )
        if monitor is not None:
            processes.append(monitor)
        for _ in range(min(cfg.num_users, MAX_PROCESSES - 1)):
            user = _launch(
                _module_command("securebank.user", table.name, "--config", args.config),
                "usuario",
            )
            if user is not None:
                processes.append(user)
            time.sleep(LAUNCH_PAUSE)

        print("Todos los procesos lanzados.  Pulse ENTER para cerrar…", flush=True)
        try:
            input()
        except EOFError:
            pass
    finally:
        for process in processes:
            try:
                process.kill()
                process.wait()
            except OSError:
                pass
        writer.stop()
        writer.join()
        try:
            dump_accounts(cfg.accounts_file, table.snapshot().accounts)
        except OSError as exc:
            print(f"{cfg.accounts_file}: {exc}", file=sys.stderr)
        table.close()
        table.unlink()

    print("Sistema cerrado y recursos liberados.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())