"""
Transaction elements and spendable outputs
"""
# tx/__init__.py
from bulletin_wallet.tx.tx import *
from bulletin_wallet.tx.utxo import *
