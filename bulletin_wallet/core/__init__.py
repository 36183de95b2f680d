"""
Contains the core elements that are used within the bulletin wallet

Core:
    -Provides the byte stream helpers used by every serializable element
    -Provides the reference formats and network parameters
    -Provides custom exceptions for the wallet, builder and rpc layers
    -Provides the runtime configuration and logging helpers
"""
# core/__init__.py
from bulletin_wallet.core.byte_stream import *
from bulletin_wallet.core.config import *
from bulletin_wallet.core.exceptions import *
from bulletin_wallet.core.formats import *
from bulletin_wallet.core.logging import *
from bulletin_wallet.core.serializable import *
