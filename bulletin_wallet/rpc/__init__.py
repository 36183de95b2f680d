"""
JSON-RPC service: error mapping, request handlers, the HTTP server and the bootstrap gate
"""
# rpc/__init__.py
from bulletin_wallet.rpc.errors import *
from bulletin_wallet.rpc.handlers import *
from bulletin_wallet.rpc.server import *
from bulletin_wallet.rpc.bootstrap import *
