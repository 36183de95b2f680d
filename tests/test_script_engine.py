"""
Tests for the ScriptEngine and the legacy SignatureEngine
"""
from secrets import token_bytes

from bulletin_wallet.cryptography import PrivKey, hash160
from bulletin_wallet.script import ExecutionContext, SignatureEngine, SigHash
from bulletin_wallet.script.script_types import p2pkh_script, p2pkh_scriptsig, encode_pushdata
from bulletin_wallet.tx import Transaction, TxInput, TxOutput


def signed_p2pkh_tx(key: PrivKey) -> tuple[Transaction, bytes]:
    """
    A one-input transaction spending a pay-to-pubkey-hash output of the key
    """
    scriptpubkey = p2pkh_script(key.pubkey.pubkey_hash())
    tx = Transaction([TxInput(token_bytes(32), 0)], [TxOutput(4000, p2pkh_script(token_bytes(20)))])
    signature = SignatureEngine().sign_input(tx, 0, scriptpubkey, key)
    tx.inputs[0].scriptsig = p2pkh_scriptsig(signature, key.pubkey.compressed())
    return tx, scriptpubkey


def test_simple_scripts(script_engine):
    # OP_1 OP_1 OP_EQUAL
    assert script_engine.validate_script(bytes.fromhex("515187"))
    # OP_1 OP_2 OP_EQUAL
    assert not script_engine.validate_script(bytes.fromhex("515287"))
    # OP_1 OP_RETURN
    assert not script_engine.validate_script(bytes.fromhex("516a"))
    # OP_1 OP_1 OP_ADD is not supported
    assert not script_engine.validate_script(bytes.fromhex("515193"))
    # Opcodes outside standard pay-to-pubkey-hash spends fail: OP_1 OP_2 OP_SWAP, OP_1 OP_SHA256
    assert not script_engine.validate_script(bytes.fromhex("51527c"))
    assert not script_engine.validate_script(bytes.fromhex("51a8"))
    # Empty stack
    assert not script_engine.validate_script(b'')
    # OP_0 leaves a false top element
    assert not script_engine.validate_script(b'\x00')


def test_hash160_preimage(script_engine):
    preimage = token_bytes(32)
    scriptpubkey = b'\xa9' + encode_pushdata(hash160(preimage)) + b'\x87'

    assert script_engine.validate_script_pair(scriptpubkey, encode_pushdata(preimage))
    assert not script_engine.validate_script_pair(scriptpubkey, encode_pushdata(token_bytes(32)))


def test_p2pkh_spend(script_engine):
    key = PrivKey(token_bytes(32))
    tx, scriptpubkey = signed_p2pkh_tx(key)
    ctx = ExecutionContext(tx=tx, input_index=0, script_code=scriptpubkey)

    assert script_engine.validate_script_pair(scriptpubkey, tx.inputs[0].scriptsig, ctx), \
        "Failed to validate signed P2PKH input"


def test_p2pkh_spend_tampered(script_engine):
    key = PrivKey(token_bytes(32))
    tx, scriptpubkey = signed_p2pkh_tx(key)

    # Changing an output invalidates the signature
    tx.outputs[0].amount += 1
    ctx = ExecutionContext(tx=tx, input_index=0, script_code=scriptpubkey)
    assert not script_engine.validate_script_pair(scriptpubkey, tx.inputs[0].scriptsig, ctx)

    # Missing context fails OP_CHECKSIG
    assert not script_engine.validate_script_pair(scriptpubkey, tx.inputs[0].scriptsig)


def test_wrong_key(script_engine):
    key = PrivKey(token_bytes(32))
    other = PrivKey(token_bytes(32))
    tx, _ = signed_p2pkh_tx(key)
    other_scriptpubkey = p2pkh_script(other.pubkey.pubkey_hash())
    ctx = ExecutionContext(tx=tx, input_index=0, script_code=other_scriptpubkey)

    assert not script_engine.validate_script_pair(other_scriptpubkey, tx.inputs[0].scriptsig, ctx)


def test_sighash_byte():
    key = PrivKey(token_bytes(32))
    tx, scriptpubkey = signed_p2pkh_tx(key)
    signature = SignatureEngine().sign_input(tx, 0, scriptpubkey, key)

    assert signature[-1] == SigHash.ALL
    assert SignatureEngine().verify_input_signature(tx, 0, scriptpubkey, signature, key.pubkey.compressed())
    assert not SignatureEngine().verify_input_signature(tx, 0, scriptpubkey, signature[:-1] + b'\x02',
                                                        key.pubkey.compressed())
