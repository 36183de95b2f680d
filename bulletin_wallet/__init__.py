"""
bulletin_wallet - a wallet-side funding engine for bulletin transactions
"""
__version__ = "0.1.0"
