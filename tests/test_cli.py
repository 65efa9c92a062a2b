import json

import pytest

from devkeyring import Keyring
from devkeyring.cli import main


def test_list(capsys):
    main(["--scheme", "ecdsa", "list"])
    lines = capsys.readouterr().out.splitlines()

    assert len(lines) == 8
    assert lines[0].split() == ["Alice", "//Alice", Keyring.Alice.public("ecdsa").hex()]
    assert lines[-1].startswith("Two")


def test_list_json(capsys):
    main(["--scheme", "ed25519", "list", "--json"])
    data = json.loads(capsys.readouterr().out)

    assert data["scheme"] == "ed25519"
    assert [a["name"] for a in data["accounts"]] == [str(k) for k in Keyring.iter()]
    assert data["accounts"][1]["seed"] == "//Bob"
    assert data["accounts"][1]["public_hex"] == Keyring.Bob.public("ed25519").hex()


def test_list_uses_environment_scheme(capsys, monkeypatch):
    monkeypatch.setenv("DEVKEYRING_SCHEME", "ed25519")
    main(["list", "--json"])

    assert json.loads(capsys.readouterr().out)["scheme"] == "ed25519"


def test_scheme_flag_overrides_environment(capsys, monkeypatch):
    monkeypatch.setenv("DEVKEYRING_SCHEME", "ed25519")
    main(["--scheme", "ecdsa", "list", "--json"])

    assert json.loads(capsys.readouterr().out)["scheme"] == "ecdsa"


def test_unknown_environment_scheme(capsys, monkeypatch):
    monkeypatch.setenv("DEVKEYRING_SCHEME", "rsa")
    with pytest.raises(SystemExit) as exc:
        main(["list"])

    assert exc.value.code == 1
    assert "unknown scheme" in capsys.readouterr().err


def test_sign_output_is_stable(capsys):
    main(["--scheme", "ecdsa", "sign", "Alice", "I am Alice!"])
    first = capsys.readouterr().out
    main(["--scheme", "ecdsa", "sign", "Alice", "I am Alice!"])

    assert capsys.readouterr().out == first
    assert first.strip() == Keyring.Alice.sign(b"I am Alice!", "ecdsa").hex()


def test_inspect_account_name(capsys):
    main(["--scheme", "ecdsa", "inspect", "bob", "--show-secret"])
    out = capsys.readouterr().out

    assert "Secret URI: //Bob" in out
    assert Keyring.Bob.public("ecdsa").hex() in out
    assert Keyring.Bob.pair("ecdsa").to_raw_vec().hex() in out


def test_inspect_hides_secret_by_default(capsys):
    main(["--scheme", "ecdsa", "inspect", "//Charlie"])
    out = capsys.readouterr().out

    assert Keyring.Charlie.public("ecdsa").hex() in out
    assert Keyring.Charlie.pair("ecdsa").to_raw_vec().hex() not in out


def test_inspect_invalid_uri(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["inspect", "//Alice/soft"])

    assert exc.value.code == 1
    assert "Could not derive key" in capsys.readouterr().err


def test_sign_then_verify(capsys):
    main(["--scheme", "ecdsa", "sign", "alice", "I am Alice!"])
    sig_hex = capsys.readouterr().out.strip()
    assert len(bytes.fromhex(sig_hex)) == 64

    main(["--scheme", "ecdsa", "verify", "Alice", "I am Alice!", sig_hex])
    assert "VALID signature." in capsys.readouterr().out


@pytest.mark.parametrize(
    "account, message",
    [("Bob", "I am Alice!"), ("Alice", "I am Bob!")],
)
def test_verify_rejects(capsys, account, message):
    main(["--scheme", "ed25519", "sign", "Alice", "I am Alice!"])
    sig_hex = capsys.readouterr().out.strip()

    with pytest.raises(SystemExit) as exc:
        main(["--scheme", "ed25519", "verify", account, message, sig_hex])

    assert exc.value.code == 1
    assert "INVALID" in capsys.readouterr().err


def test_verify_bad_hex(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["verify", "Alice", "msg", "not-hex"])

    assert exc.value.code == 1


def test_unknown_account(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["sign", "Mallory", "hello"])

    assert exc.value.code == 1
    assert "unknown test account" in capsys.readouterr().err


def test_verbose_logs_scheme(capsys, caplog):
    with caplog.at_level("DEBUG", logger="devkeyring"):
        main(["--verbose", "--scheme", "ed25519", "sign", "Bob", "hello"])

    assert "using ed25519 scheme" in caplog.text
    assert "ed25519 public key" in caplog.text
