"""
Script templates, legacy signature hashing and the script interpreter
"""
# script/__init__.py
from bulletin_wallet.script.script_types import *
from bulletin_wallet.script.signature_engine import *
from bulletin_wallet.script.script_engine import *
