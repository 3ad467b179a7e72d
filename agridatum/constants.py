#
# (c) Copyright 2025 by AgriDatum contributors. This file is covered by license found in COPYING.
#
# System constants.
#

# the PIN is the farmer's half of the credentials: digits only, exact length
PIN_LENGTH = 6

# farmer id is the leading part of a hex digest; 16 chars = 64 bits
FARMER_ID_LENGTH = 16

# signatures are shown to humans as a prefix only; never use for verification
SIGNATURE_PREVIEW_LENGTH = 32

# backend, when nothing is configured
DEFAULT_SERVER = 'http://localhost:3000'

# REST endpoints on the backend
API_KEYS_GENERATE = '/api/keys/generate'
API_HARVEST_SUBMIT = '/api/harvest/submit'
API_HARVEST_VERIFY = '/api/harvest/verify'
API_HARVEST_RECORDS = '/api/harvest/records'

# page sizes used by the original web client
DEFAULT_PAGE_LIMIT = 50
ALL_RECORDS_LIMIT = 100
LOGIN_RECORDS_LIMIT = 100

# signing strategies, in the order they may appear in config
SIGNER_REMOTE = 'remote'
SIGNER_LOCAL = 'local'
KNOWN_SIGNERS = (SIGNER_REMOTE, SIGNER_LOCAL)
DEFAULT_SIGNERS = (SIGNER_REMOTE,)

# offline stub: fixed suffixes mixed into the seed, and a testnet-looking prefix
LOCAL_PUBKEY_SUFFIX = '_public'
LOCAL_ADDRESS_SUFFIX = '_address'
LOCAL_ADDRESS_PREFIX = 'addr_test1'
LOCAL_ADDRESS_BODY_LENGTH = 50

# Cardano preprod network explorer
EXPLORER_TX_URL = 'https://preprod.cardanoscan.io/transaction/{txn}'

# length from start/end of a txn hash shown on one line
TXN_TRIM_HEAD = 12
TXN_TRIM_TAIL = 8

# the web form defaulted to this
DEFAULT_CROP = 'Maize'

EXPORT_FILENAME_TEMPLATE = 'agridatum-records-{day}.json'

# environment variables we look at
ENV_API_URL = 'AGRIDATUM_API_URL'
ENV_SIGNER = 'AGRIDATUM_SIGNER'
ENV_TIMEOUT = 'AGRIDATUM_TIMEOUT'

# EOF
