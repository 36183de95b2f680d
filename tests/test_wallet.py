"""
Tests for the Wallet: the unlock credential, reservations and creation on disk
"""
import threading

import pytest

from bulletin_wallet.core import WalletLocked, PassphraseTooShort, WalletExists
from bulletin_wallet.wallet import Wallet
from conftest import TEST_ITERATIONS, TEST_SEED, TEST_PASSPHRASE


def test_hold_unlock_reentrant(wallet):
    with wallet.hold_unlock():
        with wallet.hold_unlock():
            assert wallet.is_held
        assert wallet.is_held
    assert not wallet.is_held


def test_hold_unlock_locked(wallet):
    wallet.lock()
    with pytest.raises(WalletLocked):
        with wallet.hold_unlock():
            pass
    assert not wallet.is_held

    wallet.unlock(TEST_PASSPHRASE)
    with wallet.hold_unlock():
        assert wallet.is_held


def test_lock_waits_for_holder(wallet):
    """
    Locking from another thread waits until the current holder releases the credential
    """
    locked = threading.Event()

    def lock_wallet():
        wallet.lock()
        locked.set()

    with wallet.hold_unlock():
        thread = threading.Thread(target=lock_wallet)
        thread.start()
        assert not locked.wait(0.2), "Wallet locked while the credential was held"
        assert not wallet.manager.is_locked

    thread.join(5)
    assert locked.is_set()
    assert wallet.manager.is_locked


def test_reservation(wallet, make_credit):
    address = wallet.manager.addresses()[0]
    credit_a = make_credit(address, 1000)
    credit_b = make_credit(address, 2000)
    wallet.store.add_credit(credit_a)
    wallet.store.add_credit(credit_b)

    with wallet.reservation() as reservation:
        reservation.add(credit_a)
        assert wallet.find_eligible_outputs(1, 200) == (credit_b,)

    assert wallet.reserved() == frozenset()
    assert len(wallet.find_eligible_outputs(1, 200)) == 2


def test_is_mine(wallet):
    address = wallet.manager.addresses()[0]
    assert wallet.is_mine(address.script())
    assert not wallet.is_mine(b'\x6a\x04test')


def test_create_and_open(config):
    wallet = Wallet.create(config, TEST_PASSPHRASE, TEST_SEED, iterations=TEST_ITERATIONS)

    assert config.wallet_exists()
    assert config.txstore_path.exists()
    assert not wallet.manager.is_locked

    opened = Wallet.open(config)
    assert opened.manager.is_locked
    assert opened.manager.addresses() == wallet.manager.addresses()
    assert opened.fee_increment == config.fee_increment

    with pytest.raises(WalletExists):
        Wallet.create(config, TEST_PASSPHRASE, iterations=TEST_ITERATIONS)


def test_create_short_passphrase(config):
    with pytest.raises(PassphraseTooShort):
        Wallet.create(config, b"short", iterations=TEST_ITERATIONS)
    assert not config.wallet_exists()
