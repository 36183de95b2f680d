"""
The ScriptEngine class, a small interpreter for standard legacy spends

Only the opcodes needed to re-execute the scripts this wallet produces are supported. Any other opcode fails the
script.
"""
from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import Optional

from bulletin_wallet.core import SCRIPT, ScriptEngineError, get_logger
from bulletin_wallet.cryptography import hash160
from bulletin_wallet.script.signature_engine import SignatureEngine
from bulletin_wallet.tx.tx import Transaction

__all__ = ["ExecutionContext", "ScriptEngine"]

logger = get_logger(__name__)

# --- OP_CODES --- #
OP_0 = 0x00
OP_PUSHDATA1 = 0x4c
OP_PUSHDATA2 = 0x4d
OP_PUSHDATA4 = 0x4e
OP_1 = 0x51
OP_16 = 0x60
OP_RETURN = 0x6a
OP_DUP = 0x76
OP_EQUAL = 0x87
OP_EQUALVERIFY = 0x88
OP_HASH160 = 0xa9
OP_CHECKSIG = 0xac


@dataclass(frozen=True)
class ExecutionContext:
    tx: Optional[Transaction] = None
    input_index: Optional[int] = None
    script_code: Optional[bytes] = None  # Subscript committed to by the signature hash


def _as_bool(item: bytes) -> bool:
    """False for any encoding of zero, including negative zero"""
    for i, b in enumerate(item):
        if b != 0:
            return not (i == len(item) - 1 and b == 0x80)
    return False


class ScriptEngine:

    def __init__(self):
        self.stack: list[bytes] = []
        self.ops_log = []
        self.sig_engine = SignatureEngine()

    def clear_stacks(self):
        self.stack.clear()
        self.ops_log = []

    # --- STACK --- #

    def _push(self, item: bytes):
        if len(item) > SCRIPT.MAX_PUSH:
            raise ScriptEngineError(f"Push of {len(item)} bytes exceeds limit")
        if len(self.stack) >= SCRIPT.MAX_STACK:
            raise ScriptEngineError("Stack size limit reached")
        self.stack.append(item)

    def _pop(self) -> bytes:
        if not self.stack:
            raise ScriptEngineError("Attempted to pop from an empty stack")
        return self.stack.pop()

    def _read_push(self, stream: BytesIO, n: int) -> bytes:
        size = int.from_bytes(stream.read(n), "little") if n else None
        return self._read_exact(stream, size)

    @staticmethod
    def _read_exact(stream: BytesIO, size: int) -> bytes:
        data = stream.read(size)
        if len(data) != size:
            raise ScriptEngineError("Push exceeds script length")
        return data

    # --- SIGNATURES --- #

    def _handle_checksig(self, ctx: ExecutionContext) -> bool:
        if ctx is None or ctx.tx is None or ctx.input_index is None or ctx.script_code is None:
            raise ScriptEngineError("Missing context elements for OP_CHECKSIG")

        pubkey = self._pop()
        sig = self._pop()
        return self.sig_engine.verify_input_signature(ctx.tx, ctx.input_index, ctx.script_code, sig, pubkey)

    # --- EXECUTION --- #

    def execute_script(self, script: bytes, ctx: ExecutionContext = None):
        """
        We only execute the given script with the accompanying ExecutionContext. We do NOT validate the final stack.
        Raises ScriptEngineError when the script fails.
        """
        stream = BytesIO(script)

        while True:
            opcode_byte = stream.read(1)
            if not opcode_byte:
                break
            opcode = opcode_byte[0]
            self.ops_log.append(opcode)

            # Handle data
            if 0x01 <= opcode <= 0x4b:
                self._push(self._read_exact(stream, opcode))
                continue

            match opcode:
                case 0x00:
                    self._push(b'')
                case 0x4c:
                    self._push(self._read_push(stream, 1))
                case 0x4d:
                    self._push(self._read_push(stream, 2))
                case 0x4e:
                    self._push(self._read_push(stream, 4))
                case _ if OP_1 <= opcode <= OP_16:
                    self._push(bytes([opcode - 0x50]))
                case 0x6a:
                    raise ScriptEngineError("OP_RETURN encountered")
                case 0x76:
                    top = self._pop()
                    self._push(top)
                    self._push(top)
                case 0x87:
                    self._push(b'\x01' if self._pop() == self._pop() else b'')
                case 0x88:
                    if self._pop() != self._pop():
                        raise ScriptEngineError("Script failed OP_EQUALVERIFY")
                case 0xa9:
                    self._push(hash160(self._pop()))
                case 0xac:
                    self._push(b'\x01' if self._handle_checksig(ctx) else b'')
                case _:
                    raise ScriptEngineError(f"Unsupported opcode {opcode:#04x}")

    def validate_script_pair(self, scriptpubkey: bytes, scriptsig: bytes, ctx: ExecutionContext = None) -> bool:
        """
        Execute the scriptsig, then the scriptpubkey on the resulting stack. Any failure in either script returns
        False.
        """
        self.clear_stacks()
        try:
            self.execute_script(scriptsig, ctx)
            self.execute_script(scriptpubkey, ctx)
        except ScriptEngineError as e:
            logger.debug(f"Script execution failed: {e}")
            return False
        return self.validate_stack()

    def validate_script(self, script: bytes, ctx: ExecutionContext = None) -> bool:
        return self.validate_script_pair(script, b'', ctx)

    def validate_stack(self) -> bool:
        """
        Called at the end of the script engine. Return False if the stack is empty or its top element is false.
        """
        if not self.stack:
            return False
        result = _as_bool(self.stack[-1])
        self.stack.clear()
        return result
