"""
The SignatureEngine class, used to create and check signatures for legacy transaction inputs
"""
from __future__ import annotations

from enum import IntEnum

from bulletin_wallet.core import SignatureError, DataEncodingError, ECDSAError, ECCError
from bulletin_wallet.cryptography import hash256, encode_der_signature, decode_der_signature, PubKey, PrivKey
from bulletin_wallet.tx.tx import Transaction

__all__ = ["SigHash", "SignatureEngine"]


class SigHash(IntEnum):
    ALL = 0x01
    NONE = 0x02
    SINGLE = 0x03
    ALL_ANYONECANPAY = 0x81

    def to_byte(self) -> bytes:
        return self.value.to_bytes(1, "little")

    def for_hashing(self) -> bytes:
        """
        The sighash integer padded to 4 bytes
        """
        return self.value.to_bytes(4, "little")


class SignatureEngine:
    """Pure cryptographic operations for signatures"""

    def get_legacy_sighash(self, tx: Transaction, input_index: int, scriptpubkey: bytes,
                           sighash: SigHash = SigHash.ALL) -> bytes:
        """
        Computes legacy message_hash for signing:
            1. Remove all existing script_sigs
            2. Put the script_pubkey from referenced output in the script_sig for the input.
            3. Append the sighash bytes at the end of the serialized tx data
            4. Hash the serialized tx data
        """
        if sighash != SigHash.ALL:
            raise SignatureError(f"Unsupported sighash type {sighash!r}")
        if not 0 <= input_index < len(tx.inputs):
            raise SignatureError(f"Input index {input_index} out of range")

        tx_copy = tx.clone()
        for txin in tx_copy.inputs:
            txin.scriptsig = b''
        tx_copy.inputs[input_index].scriptsig = scriptpubkey

        return hash256(tx_copy.to_bytes() + sighash.for_hashing())

    def sign_input(self, tx: Transaction, input_index: int, scriptpubkey: bytes, private_key: PrivKey,
                   sighash: SigHash = SigHash.ALL) -> bytes:
        """
        Returns DER(r, s) || sighash byte
        """
        message_hash = self.get_legacy_sighash(tx, input_index, scriptpubkey, sighash)
        r, s = private_key.sign(message_hash)
        return encode_der_signature(r, s) + sighash.to_byte()

    def verify_input_signature(self, tx: Transaction, input_index: int, scriptpubkey: bytes, signature: bytes,
                               pubkey: bytes) -> bool:
        """
        Check a signature (DER || sighash byte) against the given serialized public key
        """
        if len(signature) < 2:
            return False
        der_sig, sighash_num = signature[:-1], signature[-1]
        try:
            sighash = SigHash(sighash_num)
            r, s = decode_der_signature(der_sig)
            public_key = PubKey.from_bytes(pubkey)
            message_hash = self.get_legacy_sighash(tx, input_index, scriptpubkey, sighash)
            return public_key.verify((r, s), message_hash)
        except (ValueError, SignatureError, DataEncodingError, ECDSAError, ECCError):
            return False
