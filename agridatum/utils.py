#
# (c) Copyright 2025 by AgriDatum contributors. This file is covered by license found in COPYING.
#
import json
from datetime import datetime, timezone
from hashlib import sha256
from .constants import *


def sha256_hex(msg):
    # single-shot SHA256 over utf-8 text, as lowercase hex
    if isinstance(msg, str):
        msg = msg.encode('utf-8')
    return sha256(msg).hexdigest()

def js_number(value):
    # JSON.stringify renders 50.0 as "50"; do the same so digests over
    # serialized payloads agree with the web client
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value

def compact_json(obj):
    # no whitespace, insertion order kept
    return json.dumps(obj, separators=(',', ':'), ensure_ascii=False)

def iso_timestamp(when=None):
    # ISO-8601 in UTC with milliseconds and a 'Z', like Date.toISOString()
    when = when or datetime.now(timezone.utc)
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    when = when.astimezone(timezone.utc)
    return when.strftime('%Y-%m-%dT%H:%M:%S.') + '%03dZ' % (when.microsecond // 1000)

def parse_weight(value):
    # backend sends numeric columns as strings, like "12.50"
    if value is None or value == '':
        return None
    return float(value)

def signature_preview(sig):
    # display-only prefix
    if sig is None:
        return None
    return sig[0:SIGNATURE_PREVIEW_LENGTH]

def trim_txn(txn):
    # "0123456789ab...89abcdef" for one-line display
    if not txn:
        return ''
    if len(txn) <= TXN_TRIM_HEAD + TXN_TRIM_TAIL:
        return txn
    return txn[0:TXN_TRIM_HEAD] + '...' + txn[-TXN_TRIM_TAIL:]

def explorer_url(txn):
    return EXPLORER_TX_URL.format(txn=txn)

# EOF
