"""
Passphrase-based encryption of wallet secrets
"""
import hmac
import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from bulletin_wallet.core import SETUP
from bulletin_wallet.cryptography.hash_functions import pbkdf2_sha256, sha256

__all__ = ["derive_key", "passphrase_verifier", "check_passphrase", "encrypt_secret", "decrypt_secret"]


def derive_key(passphrase: bytes, salt: bytes, iterations: int = SETUP.PBKDF2_ITERATIONS) -> bytes:
    return pbkdf2_sha256(passphrase, salt, iterations)


def passphrase_verifier(key: bytes) -> bytes:
    """The stored value used to check a passphrase without decrypting"""
    return sha256(b'verifier' + key)


def check_passphrase(key: bytes, verifier: bytes) -> bool:
    return hmac.compare_digest(passphrase_verifier(key), verifier)


def encrypt_secret(key: bytes, secret: bytes) -> tuple[bytes, bytes]:
    """Returns (nonce, ciphertext)"""
    nonce = secrets.token_bytes(SETUP.NONCE_BYTES)
    return nonce, AESGCM(key).encrypt(nonce, secret, None)


def decrypt_secret(key: bytes, nonce: bytes, ciphertext: bytes) -> bytes | None:
    """Returns None when the key does not authenticate the ciphertext"""
    try:
        return AESGCM(key).decrypt(nonce, ciphertext, None)
    except InvalidTag:
        return None
