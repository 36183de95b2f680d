"""
Chain server access
"""
# chain/__init__.py
from bulletin_wallet.chain.client import *
