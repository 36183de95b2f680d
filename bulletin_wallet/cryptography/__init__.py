"""
Elliptic curve cryptography, hash functions and encodings
"""
# cryptography/__init__.py

from bulletin_wallet.cryptography.cipher import *
from bulletin_wallet.cryptography.codec import *
from bulletin_wallet.cryptography.ecc import *
from bulletin_wallet.cryptography.ecc_keys import *
from bulletin_wallet.cryptography.ecdsa import *
from bulletin_wallet.cryptography.hash_functions import *
