"""Testship constants."""

INTEGER_TYPES = {"u8", "u16", "u32", "u64", "i8", "i16", "i32", "i64"}
BOOL_TYPE = "bool"

# Inclusive bounds used by the form layer.
INTEGER_RANGES = {
    "u8": (0, 2**8 - 1),
    "u16": (0, 2**16 - 1),
    "u32": (0, 2**32 - 1),
    "u64": (0, 2**64 - 1),
    "i8": (-(2**7), 2**7 - 1),
    "i16": (-(2**15), 2**15 - 1),
    "i32": (-(2**31), 2**31 - 1),
    "i64": (-(2**63), 2**63 - 1),
}

PUBKEY_TYPES = {"pubkey", "publicKey"}

DEFAULT_BASE_URL = "https://app.testship.xyz"
DEFAULT_CLUSTER = "devnet"

CLUSTER_URLS = {
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
    "local": "http://localhost:8899",
}

SHARE_PARAM = "state"
SHARE_PREFIX = "v1."
SHARE_VERSION = 1
# Browsers and proxies start rejecting URLs well before 16k; stay under 8k.
MAX_SHARE_URL_LENGTH = 8000

FORM_HISTORY_PREFIX = "testship_form_"
ACCOUNTS_HISTORY_PREFIX = "testship_accounts_"
SAVED_ACCOUNTS_KEY = "savedAccounts"
HISTORY_PREFIXES = (FORM_HISTORY_PREFIX, ACCOUNTS_HISTORY_PREFIX)
