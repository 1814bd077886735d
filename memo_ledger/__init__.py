"""
Memo Ledger - Encrypted transaction memos for Steem/Hive-style ledgers.

Wire format: '#' + base58(EncryptedMemo)
Key format: secp256k1, WIF private keys, STM-prefixed public keys
"""

__version__ = "0.1.0"
__wire_format__ = "steem-encrypted-memo/v1"

# Reserved first character of an encrypted memo
MEMO_MARKER = "#"

# Public key string prefix used when none is configured
DEFAULT_ADDRESS_PREFIX = "STM"
