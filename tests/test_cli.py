"""
Tests for the command line entry point
"""
from click.testing import CliRunner

from bulletin_wallet.cli import main
from bulletin_wallet.core import WalletConfig
from bulletin_wallet.wallet import KeyManager
from conftest import TEST_SEED


def test_create_and_newaddress(tmp_path):
    runner = CliRunner()
    datadir = str(tmp_path)

    created = runner.invoke(main, ["--datadir", datadir, "create", "--passphrase", "passphrase",
                                   "--seed", TEST_SEED.hex()])
    assert created.exit_code == 0, created.output
    first = created.output.strip().splitlines()[-1]

    config = WalletConfig(data_dir=tmp_path)
    assert config.wallet_exists()
    assert KeyManager.open(config.keystore_path).addresses()[0].encode() == first

    derived = runner.invoke(main, ["--datadir", datadir, "newaddress", "--passphrase", "passphrase"])
    assert derived.exit_code == 0, derived.output
    second = derived.output.strip().splitlines()[-1]
    assert second != first
    assert len(KeyManager.open(config.keystore_path).addresses()) == 2

    again = runner.invoke(main, ["--datadir", datadir, "create", "--passphrase", "passphrase"])
    assert again.exit_code != 0


def test_newaddress_without_wallet(tmp_path):
    result = CliRunner().invoke(main, ["--datadir", str(tmp_path), "newaddress", "--passphrase", "passphrase"])
    assert result.exit_code != 0
    assert "No wallet found" in result.output


def test_bad_seed(tmp_path):
    result = CliRunner().invoke(main, ["--datadir", str(tmp_path), "create", "--passphrase", "passphrase",
                                       "--seed", "not hex"])
    assert result.exit_code != 0


def test_newaddress_with_stale_store(tmp_path):
    config = WalletConfig(data_dir=tmp_path)
    config.network_dir.mkdir(parents=True)
    config.txstore_path.touch()

    result = CliRunner().invoke(main, ["--datadir", str(tmp_path), "newaddress", "--passphrase", "passphrase"])
    assert result.exit_code != 0
    assert "Keystore missing" in result.output
