#
# (c) Copyright 2025 by AgriDatum contributors. This file is covered by license found in COPYING.
#
# Farmer identity derivation.
#
import pytest
from agridatum.identity import derive, validate_pin, is_farmer_id
from agridatum.exceptions import HarvestValidationError

SEED = '784a17ec1667a40de07550f48d8994f47383eab87a1cc0ab639b3458fb6401c7'
FARMER = '8d5314a7a54c09a7'

def test_known_value():
    # sha256('+254700000001' + '123456'), then sha256 of that hex, first 16
    ident = derive('+254700000001', '123456')
    assert ident.seed_input == SEED
    assert ident.farmer_id == FARMER

def test_deterministic():
    a = derive('+254700000001', '123456')
    b = derive('+254700000001', '123456')
    assert a == b

@pytest.mark.parametrize('phone,pin', [
    ('+254700000001', '123457'),
    ('+254700000002', '123456'),
    ('254700000001', '123456'),
    ('', '000000'),
    ('+1 (555) 010-0000', '999999'),
])
def test_distinct(phone, pin):
    ident = derive(phone, pin)
    assert ident.farmer_id != FARMER
    assert len(ident.farmer_id) == 16
    assert is_farmer_id(ident.farmer_id)

def test_no_separator():
    # concatenation is plain: these two collide by construction
    assert derive('12', '345678') == derive('1234', '5678')

@pytest.mark.parametrize('pin', ['000000', '123456', '999999'])
def test_pin_ok(pin):
    assert validate_pin(pin) == pin

@pytest.mark.parametrize('pin', ['', None, '12345', '1234567', '12345a', ' 23456', '１２３４５６'])
def test_pin_bad(pin):
    with pytest.raises(HarvestValidationError):
        validate_pin(pin)

def test_farmer_id_alphabet():
    assert is_farmer_id('0123456789abcdef')
    assert not is_farmer_id('0123456789ABCDEF')
    assert not is_farmer_id('0123456789abcde')
    assert not is_farmer_id('0123456789abcdeg')
    assert not is_farmer_id(None)

# EOF
