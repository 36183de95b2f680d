"""
Keys, the wallet runtime and the bulletin transaction builder
"""
# wallet/__init__.py
from bulletin_wallet.wallet.xkeys import *
from bulletin_wallet.wallet.keystore import *
from bulletin_wallet.wallet.key_manager import *
from bulletin_wallet.wallet.fees import *
from bulletin_wallet.wallet.selector import *
from bulletin_wallet.wallet.wallet import *
from bulletin_wallet.wallet.signer import *
from bulletin_wallet.wallet.builder import *
