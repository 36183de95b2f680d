"""
Persistence for the wallet's credits and transaction history
"""
# database/__init__.py
from bulletin_wallet.database.tx_store import *
