"""
The custom exceptions used throughout the bulletin wallet
"""
__all__ = ["ReadError", "StreamError", "ECDSAError", "ECCError", "DataEncodingError", "ScriptEngineError",
           "SignatureError", "ExtendedKeyError", "WalletError", "InvalidAddress", "UnknownAddress",
           "ChainUnavailable", "NoEligibleOutputForAddress", "InsufficientFunds", "ScriptValidationFailed",
           "Unsupported", "PassphraseTooShort", "InternalStoreFailure", "BulletinError", "WalletLocked",
           "WalletExists", "SetupTimeout", "SetupAlreadyComplete", "TransactionUnrecorded"]


class StreamError(Exception):
    """
    Catchall for stream errors
    """
    pass


class ReadError(StreamError):
    """
    For when trying to read data of length n from the stream and receiving data of length < n
    """
    pass


class DataEncodingError(Exception):
    """
    For use in encoding/decoding algorithms
    """
    pass


class ECCError(Exception):
    """
    For use when deserializing pubkeys or handling out of bounds private keys
    """
    pass


class ECDSAError(Exception):
    """
    Raised during ECDSA operations for out of bounds values
    """
    pass


class ScriptEngineError(Exception):
    """
    For use in the script engine, when missing context items, malformed scripts, etc...
    """
    pass


class SignatureError(Exception):
    """
    For use in the Signature Engine
    """
    pass


class ExtendedKeyError(Exception):
    """
    Raised for invalid extended key data or derivation requests
    """
    pass


# --- WALLET / BUILDER --- #

class WalletError(Exception):
    """
    Parent class for Wallet errors
    """
    pass


class InvalidAddress(WalletError):
    """
    The address is malformed or belongs to another network
    """
    pass


class UnknownAddress(WalletError):
    """
    The address is well-formed but not controlled by this wallet's key manager
    """
    pass


class ChainUnavailable(WalletError):
    """
    The chain server could not be reached
    """
    pass


class NoEligibleOutputForAddress(WalletError):
    """
    No confirmed pay-to-pubkey-hash output exists at the authoring address
    """
    pass


class InsufficientFunds(WalletError):
    """
    The eligible outputs cannot cover the burn plus fee
    """

    def __init__(self, have: int, needed: int, fee: int):
        self.have = have
        self.needed = needed
        self.fee = fee
        super().__init__(f"Insufficient funds: have {have}, need {needed} with fee {fee}")


class ScriptValidationFailed(WalletError):
    """
    A signed input failed to execute against its previous output script
    """

    def __init__(self, input_index: int, reason: str = ""):
        self.input_index = input_index
        message = f"Script validation failed for input {input_index}"
        super().__init__(f"{message}: {reason}" if reason else message)


class InternalStoreFailure(WalletError):
    """
    The transaction store refused an insertion or debit
    """
    pass


class TransactionUnrecorded(InternalStoreFailure):
    """
    The transaction was broadcast but could not be recorded in the store
    """

    def __init__(self, txid: str, reason: str = ""):
        self.txid = txid
        super().__init__(f"Transaction {txid} was broadcast but not recorded: {reason}")


class BulletinError(WalletError):
    """
    Invalid bulletin parameters (board, message or author)
    """
    pass


class WalletLocked(WalletError):
    """
    The wallet's unlock credential could not be acquired
    """
    pass


class WalletExists(WalletError):
    """
    Raised when creating a wallet over an existing keystore
    """
    pass


# --- BOOTSTRAP --- #

class Unsupported(Exception):
    """
    Command not servable in the current state
    """
    pass


class PassphraseTooShort(Exception):
    """
    Wallet setup passphrase below the minimum length
    """
    pass


class SetupTimeout(Exception):
    """
    The bootstrap gate did not receive a setup request in time
    """
    pass


class SetupAlreadyComplete(Exception):
    """
    The one-shot setup signal has already been sent
    """
    pass
