"""
Bulletin payload encoding
"""
# bulletin/__init__.py
from bulletin_wallet.bulletin.bulletin import *
