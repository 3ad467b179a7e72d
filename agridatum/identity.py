#
# (c) Copyright 2025 by AgriDatum contributors. This file is covered by license found in COPYING.
#
# identity.py
#
# Farmer identity is never stored anywhere: it's recomputed from the phone
# number and PIN each time, so the same credentials always land on the same
# farmer id.
#
import string
from collections import namedtuple
from .constants import PIN_LENGTH, FARMER_ID_LENGTH
from .exceptions import HarvestValidationError
from .utils import sha256_hex

# seed_input: hex digest, used as key material input (not itself a key)
# farmer_id: short hex label standing in for an account
DerivedIdentity = namedtuple('DerivedIdentity', 'seed_input farmer_id')

def derive(phone_number: str, pin: str) -> DerivedIdentity:
    # Pure function of the credentials. Caller must validate the PIN.
    # - no separator between phone and PIN
    seed_input = sha256_hex(phone_number + pin)
    farmer_id = sha256_hex(seed_input)[0:FARMER_ID_LENGTH]

    return DerivedIdentity(seed_input, farmer_id)

def validate_pin(pin):
    # exactly six ascii digits, nothing else (no spaces, no unicode digits)
    if not pin:
        raise HarvestValidationError("PIN is required.")

    if len(pin) != PIN_LENGTH or not all(ch in string.digits for ch in pin):
        raise HarvestValidationError(f"PIN must be exactly {PIN_LENGTH} digits.")

    return pin

def is_farmer_id(value):
    return (isinstance(value, str) and len(value) == FARMER_ID_LENGTH
                and all(ch in '0123456789abcdef' for ch in value))

# EOF
