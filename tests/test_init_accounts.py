from securebank.files import load_accounts
from securebank.init_accounts import create_accounts_file, main
from securebank.models import initial_accounts


def test_create_accounts_file_round_trip(tmp_path):
    path = tmp_path / "cuentas.dat"
    count = create_accounts_file(path)
    loaded = load_accounts(path)
    assert count == len(initial_accounts())
    assert loaded == initial_accounts()


def test_create_accounts_file_overwrites(tmp_path):
    path = tmp_path / "cuentas.dat"
    path.write_bytes(b"garbage" * 100)
    create_accounts_file(path)
    assert load_accounts(path) == initial_accounts()


def test_main_success(tmp_path, capsys):
    path = tmp_path / "cuentas.dat"
    assert main([str(path)]) == 0
    assert load_accounts(path) == initial_accounts()
    assert "creado con la estructura nueva" in capsys.readouterr().out


def test_main_failure(tmp_path, capsys):
    path = tmp_path / "missing" / "cuentas.dat"
    assert main([str(path)]) == 1
    assert str(path) in capsys.readouterr().err
    assert not path.exists()