"""
Script classes, address encoding and the standard script templates
"""
from enum import Enum

from bulletin_wallet.core import NetParams, InvalidAddress, DataEncodingError, ScriptEngineError
from bulletin_wallet.cryptography import encode_base58check, decode_base58check

__all__ = ["ScriptClass", "Address", "classify", "extract_addresses", "decode_address", "p2pkh_script",
           "pay_to_addr_script", "p2pkh_scriptsig", "encode_pushdata", "parse_pushes"]

# --- OP_CODES --- #
OP_0 = 0x00
OP_PUSHDATA1 = 0x4c
OP_PUSHDATA2 = 0x4d
OP_PUSHDATA4 = 0x4e
OP_RETURN = 0x6a
OP_DUP = 0x76
OP_EQUAL = 0x87
OP_EQUALVERIFY = 0x88
OP_HASH160 = 0xa9
OP_CHECKSIG = 0xac

HASH_BYTES = 20
PUBKEY_LENGTHS = (33, 65)


class ScriptClass(Enum):
    NONSTANDARD = "nonstandard"
    PUBKEY = "pubkey"
    PUBKEY_HASH = "pubkeyhash"
    SCRIPT_HASH = "scripthash"
    NULL_DATA = "nulldata"


class Address:
    """
    A decoded base58 address: script class and 20-byte hash bound to a network
    """
    __slots__ = ("script_class", "hash160", "net")

    def __init__(self, script_class: ScriptClass, hash160: bytes, net: NetParams):
        self.script_class = script_class
        self.hash160 = hash160
        self.net = net

    def encode(self) -> str:
        prefix = self.net.p2pkh_prefix if self.script_class == ScriptClass.PUBKEY_HASH else self.net.p2sh_prefix
        return encode_base58check(prefix + self.hash160)

    def script(self) -> bytes:
        if self.script_class == ScriptClass.PUBKEY_HASH:
            return p2pkh_script(self.hash160)
        return bytes([OP_HASH160, HASH_BYTES]) + self.hash160 + bytes([OP_EQUAL])

    def __eq__(self, other):
        return isinstance(other, Address) and self.encode() == other.encode()

    def __hash__(self):
        return hash(self.encode())

    def __str__(self):
        return self.encode()

    def __repr__(self):
        return f"Address({self.encode()})"


def decode_address(address: str, net: NetParams) -> Address:
    """
    Decode a base58check address, failing with InvalidAddress if malformed or foreign to the network
    """
    try:
        data = decode_base58check(address)
    except DataEncodingError as e:
        raise InvalidAddress(f"Malformed address {address!r}: {e}") from e

    if len(data) != 1 + HASH_BYTES:
        raise InvalidAddress(f"Malformed address {address!r}: unexpected length")

    prefix, payload = data[:1], data[1:]
    if prefix == net.p2pkh_prefix:
        return Address(ScriptClass.PUBKEY_HASH, payload, net)
    if prefix == net.p2sh_prefix:
        return Address(ScriptClass.SCRIPT_HASH, payload, net)
    raise InvalidAddress(f"Address {address!r} is not valid for network {net.name}")


# --- TEMPLATES --- #

def p2pkh_script(pubkeyhash: bytes) -> bytes:
    """OP_DUP || OP_HASH160 || OP_PUSHBYTES_20 || pubkeyhash || OP_EQUALVERIFY || OP_CHECKSIG"""
    if len(pubkeyhash) != HASH_BYTES:
        raise ValueError("Pubkey hash must be 20 bytes")
    return bytes([OP_DUP, OP_HASH160, HASH_BYTES]) + pubkeyhash + bytes([OP_EQUALVERIFY, OP_CHECKSIG])


def pay_to_addr_script(address: Address) -> bytes:
    return address.script()


def encode_pushdata(data: bytes) -> bytes:
    """
    Minimal push of the given data
    """
    length = len(data)
    if length <= 0x4b:
        return bytes([length]) + data
    if length <= 0xff:
        return bytes([OP_PUSHDATA1, length]) + data
    if length <= 0xffff:
        return bytes([OP_PUSHDATA2]) + length.to_bytes(2, "little") + data
    return bytes([OP_PUSHDATA4]) + length.to_bytes(4, "little") + data


def p2pkh_scriptsig(signature: bytes, pubkey: bytes) -> bytes:
    """<sig || hashtype> <pubkey>"""
    if len(pubkey) not in PUBKEY_LENGTHS:
        raise ValueError("Given public key not of allowable length")
    return encode_pushdata(signature) + encode_pushdata(pubkey)


def parse_pushes(script: bytes) -> list[bytes]:
    """
    Return the data pushes of a push-only script. Raises ScriptEngineError on any other opcode.
    """
    pushes = []
    i = 0
    while i < len(script):
        opcode = script[i]
        i += 1
        if 0x01 <= opcode <= 0x4b:
            size = opcode
        elif opcode == OP_PUSHDATA1:
            size, i = script[i], i + 1
        elif opcode == OP_PUSHDATA2:
            size, i = int.from_bytes(script[i:i + 2], "little"), i + 2
        elif opcode == OP_PUSHDATA4:
            size, i = int.from_bytes(script[i:i + 4], "little"), i + 4
        elif opcode == OP_0:
            pushes.append(b'')
            continue
        else:
            raise ScriptEngineError(f"Non-push opcode {opcode:#04x} in push-only script")
        if i + size > len(script):
            raise ScriptEngineError("Push exceeds script length")
        pushes.append(script[i:i + size])
        i += size
    return pushes


# --- CLASSIFICATION --- #

def _is_p2pkh(script: bytes) -> bool:
    return (len(script) == 25 and script[0] == OP_DUP and script[1] == OP_HASH160 and script[2] == HASH_BYTES
            and script[23] == OP_EQUALVERIFY and script[24] == OP_CHECKSIG)


def _is_p2sh(script: bytes) -> bool:
    return len(script) == 23 and script[0] == OP_HASH160 and script[1] == HASH_BYTES and script[22] == OP_EQUAL


def _is_p2pk(script: bytes) -> bool:
    return (len(script) - 2 in PUBKEY_LENGTHS and script[0] == len(script) - 2
            and script[-1] == OP_CHECKSIG)


def classify(script: bytes) -> ScriptClass:
    if _is_p2pkh(script):
        return ScriptClass.PUBKEY_HASH
    if _is_p2sh(script):
        return ScriptClass.SCRIPT_HASH
    if _is_p2pk(script):
        return ScriptClass.PUBKEY
    if script[:1] == bytes([OP_RETURN]):
        return ScriptClass.NULL_DATA
    return ScriptClass.NONSTANDARD


def extract_addresses(script: bytes, net: NetParams) -> tuple[ScriptClass, list[Address]]:
    """
    Returns the script class and the addresses the script pays to
    """
    script_class = classify(script)
    if script_class == ScriptClass.PUBKEY_HASH:
        return script_class, [Address(script_class, script[3:23], net)]
    if script_class == ScriptClass.SCRIPT_HASH:
        return script_class, [Address(script_class, script[2:22], net)]
    return script_class, []
