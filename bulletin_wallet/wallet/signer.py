"""
Signing and validation of wallet transactions

Every input must spend a pay-to-pubkey-hash credit whose key the KeyManager holds.
"""
from bulletin_wallet.core import SignatureError, ScriptValidationFailed, get_logger
from bulletin_wallet.script.script_engine import ScriptEngine, ExecutionContext
from bulletin_wallet.script.script_types import ScriptClass, extract_addresses, p2pkh_scriptsig
from bulletin_wallet.script.signature_engine import SignatureEngine
from bulletin_wallet.tx.tx import Transaction
from bulletin_wallet.tx.utxo import Credit
from bulletin_wallet.wallet.key_manager import KeyManager

__all__ = ["sign_tx", "validate_tx"]

logger = get_logger(__name__)


def _check_inputs(tx: Transaction, credits: list[Credit]):
    if len(tx.inputs) != len(credits):
        raise SignatureError(f"Transaction has {len(tx.inputs)} inputs but {len(credits)} previous outputs given")
    for i, (txin, credit) in enumerate(zip(tx.inputs, credits)):
        if txin.outpoint != credit.outpoint:
            raise SignatureError(f"Input {i} does not spend the given previous output")


def sign_tx(tx: Transaction, credits: list[Credit], manager: KeyManager):
    """
    Sign every input in place. credits[i] is the output spent by input i.
    """
    _check_inputs(tx, credits)
    sig_engine = SignatureEngine()

    for i, credit in enumerate(credits):
        script_class, addrs = extract_addresses(credit.scriptpubkey, manager.net)
        if script_class != ScriptClass.PUBKEY_HASH:
            raise SignatureError(f"Cannot sign input {i} spending a {script_class.value} output")
        private_key = manager.private_key(addrs[0])
        signature = sig_engine.sign_input(tx, i, credit.scriptpubkey, private_key)
        tx.inputs[i].scriptsig = p2pkh_scriptsig(signature, private_key.pubkey.compressed())


def validate_tx(tx: Transaction, credits: list[Credit]):
    """
    Execute every input's scriptsig against the scriptpubkey it spends. Raises ScriptValidationFailed naming the
    first input that does not verify.
    """
    _check_inputs(tx, credits)
    engine = ScriptEngine()

    for i, credit in enumerate(credits):
        ctx = ExecutionContext(tx=tx, input_index=i, script_code=credit.scriptpubkey)
        if not engine.validate_script_pair(credit.scriptpubkey, tx.inputs[i].scriptsig, ctx):
            logger.error(f"Input {i} of tx {tx.txid_hex} failed validation")
            raise ScriptValidationFailed(i)
