"""
Tests for the bootstrap gate and the wallet setup handshake
"""
from dataclasses import replace

import pytest
import requests

from bulletin_wallet.core import Unsupported, PassphraseTooShort, SetupAlreadyComplete, SetupTimeout, WalletError
from bulletin_wallet.rpc import BootstrapGate, GateDispatcher, GateState, SetupSignal, JSONRPCError, RPCErrorCode, \
    wait_for_setup
from bulletin_wallet.wallet import Wallet
from conftest import TEST_ITERATIONS, TEST_SEED, TEST_PASSPHRASE


@pytest.fixture()
def gate(config):
    return BootstrapGate(config, SetupSignal(), TEST_ITERATIONS)


def test_gate_closed(gate):
    assert gate.state == GateState.NO_WALLET
    with pytest.raises(Unsupported):
        gate.call("ping")


def test_gate_permitted_commands(gate):
    gate.open()

    assert gate.call("ping") is None
    assert gate.call("getwalletstate") == {"haswallet": False, "chainserver": False}
    with pytest.raises(Unsupported):
        gate.call("sendbulletin", ["addr", "board", "message"])

    response = GateDispatcher(gate).handle_request({"method": "getnewaddress", "params": [], "id": 7})
    assert response["error"]["code"] == RPCErrorCode.METHOD_NOT_FOUND
    assert response["id"] == 7


def test_wallet_setup(gate, config):
    gate.open()
    address = gate.call("walletsetup", [TEST_PASSPHRASE.decode(), TEST_SEED.hex()])

    assert gate.state == GateState.INITIALIZED
    assert gate.signal.done
    wallet = gate.signal.wait(0)
    assert wallet.manager.addresses()[0].encode() == address
    assert config.wallet_exists()

    # The gate stops serving once the wallet exists
    with pytest.raises(Unsupported):
        gate.call("walletsetup", [TEST_PASSPHRASE.decode()])


def test_wallet_setup_bad_params(gate, config):
    gate.open()

    with pytest.raises(PassphraseTooShort):
        gate.call("walletsetup", ["short"])
    with pytest.raises(JSONRPCError) as exc_info:
        gate.call("walletsetup", [TEST_PASSPHRASE.decode(), "zz"])
    assert exc_info.value.code == RPCErrorCode.INVALID_PARAMETER
    with pytest.raises(JSONRPCError):
        gate.call("walletsetup", [TEST_PASSPHRASE.decode(), "00" * 8])
    with pytest.raises(JSONRPCError):
        gate.call("walletsetup", [])
    with pytest.raises(JSONRPCError) as exc_info:
        gate.call("walletsetup", ["abcdef\ud800"])
    assert exc_info.value.code == RPCErrorCode.INVALID_PARAMETER

    response = GateDispatcher(gate).handle_request({"method": "walletsetup", "params": ["short"], "id": 1})
    assert response["error"]["code"] == RPCErrorCode.INVALID_PARAMETER

    assert gate.state == GateState.AWAITING_SETUP
    assert not config.wallet_exists()


def test_setup_signal():
    signal = SetupSignal()
    with pytest.raises(SetupTimeout):
        signal.wait(0.05)

    sentinel = object()
    signal.send(sentinel)
    assert signal.wait() is sentinel
    assert signal.wait(0) is sentinel, "Second waiter was not released"

    with pytest.raises(SetupAlreadyComplete):
        signal.send(object())


def test_wait_for_existing_wallet(config):
    Wallet.create(config, TEST_PASSPHRASE, TEST_SEED, iterations=TEST_ITERATIONS)

    wallet = wait_for_setup(config, TEST_ITERATIONS)
    assert wallet.manager.is_locked


def test_wait_with_stale_store(config):
    """
    A transaction store without a keystore does not open the bootstrap gate
    """
    config.network_dir.mkdir(parents=True)
    config.txstore_path.touch()

    with pytest.raises(WalletError):
        wait_for_setup(config, TEST_ITERATIONS)


def test_wait_for_setup_timeout(config):
    with pytest.raises(SetupTimeout):
        wait_for_setup(replace(config, setup_timeout=0.2), TEST_ITERATIONS)
    assert not config.wallet_exists()


def test_setup_over_http(config):
    """
    A client sets up the wallet through the gate server. Other commands are refused until then.
    """
    responses = {}

    def client(server):
        refused = requests.post(server.url, json={"method": "sendbulletin", "params": [], "id": 1}, timeout=10)
        responses["refused"] = refused.json()
        setup = requests.post(server.url, json={"method": "walletsetup", "params": {"passphrase": "passphrase"},
                                                "id": 2}, timeout=10)
        responses["setup"] = setup.json()

    wallet = wait_for_setup(replace(config, setup_timeout=30), TEST_ITERATIONS, on_listening=client)

    assert responses["refused"]["error"]["code"] == RPCErrorCode.METHOD_NOT_FOUND
    assert responses["setup"]["error"] is None
    assert responses["setup"]["result"] == wallet.manager.addresses()[0].encode()
    assert not wallet.manager.is_locked
    assert config.wallet_exists()
