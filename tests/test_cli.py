"""
CLI and Settings Tests
"""

import base58
import pytest
from click.testing import CliRunner

from cli.main import cli
from memo_crypto import aes
from memo_ledger import memo
from memo_ledger.keys import PrivateKey
from memo_ledger.models import EncryptedMemo
from memo_ledger.serializer import serialize_memo
from memo_ledger.settings import Settings

ALICE = PrivateKey.from_seed("alice")
BOB = PrivateKey.from_seed("bob")
CAROL = PrivateKey.from_seed("carol")


def _unframed_memo(raw: bytes) -> str:
    res = aes.encrypt(ALICE, BOB.public_key(), raw, nonce=4242)
    envelope = EncryptedMemo(
        from_key=ALICE.public_key(),
        to=BOB.public_key(),
        nonce=res.nonce,
        check=res.checksum,
        encrypted=res.message,
    )
    return "#" + base58.b58encode(serialize_memo(envelope)).decode("ascii")


@pytest.fixture
def runner(monkeypatch):
    for name in ("MEMO_ADDRESS_PREFIX", "MEMO_KEY_ROLE", "MEMO_LOG_LEVEL",
                 "MEMO_STRICT_FRAMING", "MEMO_PRIVATE_KEY"):
        monkeypatch.delenv(name, raising=False)
    return CliRunner()


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("MEMO_ADDRESS_PREFIX", "MEMO_KEY_ROLE", "MEMO_LOG_LEVEL", "MEMO_STRICT_FRAMING"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings.load()
        assert settings.ADDRESS_PREFIX == "STM"
        assert settings.KEY_ROLE == "memo"
        assert settings.LOG_LEVEL == "WARNING"
        assert settings.STRICT_FRAMING is False

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("MEMO_ADDRESS_PREFIX", "TST")
        monkeypatch.setenv("MEMO_LOG_LEVEL", "debug")
        monkeypatch.setenv("MEMO_STRICT_FRAMING", "yes")
        settings = Settings.load()
        assert settings.ADDRESS_PREFIX == "TST"
        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.STRICT_FRAMING is True


class TestCommands:

    def test_encode_decode(self, runner):
        to = BOB.public_key().to_string()
        result = runner.invoke(
            cli, ["encode", "--key", ALICE.to_wif(), "--to", to, "--nonce", "12345", "#hello"]
        )
        assert result.exit_code == 0, result.output
        encoded = result.output.strip()
        assert encoded == memo.encode(ALICE, BOB.public_key(), "#hello", nonce=12345)

        result = runner.invoke(cli, ["decode", "--key", BOB.to_wif(), encoded])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "#hello"

    def test_key_from_env(self, runner, monkeypatch):
        encoded = memo.encode(ALICE, BOB.public_key(), "#via env")
        monkeypatch.setenv("MEMO_PRIVATE_KEY", BOB.to_wif())
        result = runner.invoke(cli, ["decode", encoded])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "#via env"

    def test_plain_text_echoed(self, runner):
        to = BOB.public_key().to_string()
        result = runner.invoke(cli, ["encode", "--key", ALICE.to_wif(), "--to", to, "hello"])
        assert result.exit_code == 0
        assert result.output.strip() == "hello"

    def test_wrong_key_fails(self, runner):
        encoded = memo.encode(ALICE, BOB.public_key(), "#secret")
        result = runner.invoke(cli, ["decode", "--key", CAROL.to_wif(), encoded])
        assert result.exit_code == 1
        assert "Invalid nonce" in result.output

    def test_bad_wif(self, runner):
        result = runner.invoke(cli, ["pubkey", "--key", "not-a-key"])
        assert result.exit_code == 2

    def test_bad_recipient(self, runner):
        result = runner.invoke(
            cli, ["encode", "--key", ALICE.to_wif(), "--to", "XYZabc", "#hi"]
        )
        assert result.exit_code == 2

    def test_pubkey(self, runner):
        result = runner.invoke(cli, ["pubkey", "--key", ALICE.to_wif()])
        assert result.exit_code == 0
        assert result.output.strip() == ALICE.public_key().to_string()

    def test_pubkey_prefix_from_env(self, runner, monkeypatch):
        monkeypatch.setenv("MEMO_ADDRESS_PREFIX", "TST")
        result = runner.invoke(cli, ["pubkey", "--key", ALICE.to_wif()])
        assert result.output.strip().startswith("TST")

    def test_keygen(self, runner):
        result = runner.invoke(cli, ["keygen", "--username", "alice", "--password", "hunter2"])
        assert result.exit_code == 0
        expected = PrivateKey.from_login("alice", "hunter2", role="memo")
        assert f"private: {expected.to_wif()}" in result.output
        assert f"public:  {expected.public_key().to_string()}" in result.output

    def test_inspect(self, runner):
        encoded = memo.encode(ALICE, BOB.public_key(), "#hello", nonce=12345)
        result = runner.invoke(cli, ["inspect", encoded])
        assert result.exit_code == 0
        assert "nonce:     12345" in result.output
        assert BOB.public_key().to_string() in result.output

    def test_inspect_plain(self, runner):
        result = runner.invoke(cli, ["inspect", "hello"])
        assert result.exit_code == 1

    @pytest.mark.parametrize("nonce", ["-1", str(2**64)])
    def test_nonce_out_of_range(self, runner, nonce):
        to = BOB.public_key().to_string()
        result = runner.invoke(
            cli, ["encode", "--key", ALICE.to_wif(), "--to", to, "--nonce", nonce, "#x"]
        )
        assert result.exit_code == 2
        assert not isinstance(result.exception, ValueError)

    def test_strict_framing_from_env(self, runner, monkeypatch):
        """MEMO_STRICT_FRAMING turns the raw UTF-8 fallback into an error."""
        encoded = _unframed_memo(b"raw memo text")
        result = runner.invoke(cli, ["decode", "--key", BOB.to_wif(), encoded])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "#raw memo text"

        monkeypatch.setenv("MEMO_STRICT_FRAMING", "true")
        result = runner.invoke(cli, ["decode", "--key", BOB.to_wif(), encoded])
        assert result.exit_code == 1
        assert "not length-prefixed" in result.output
