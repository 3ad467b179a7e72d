#
# (c) Copyright 2025 by AgriDatum contributors. This file is covered by license found in COPYING.
#
# Backend calls and the snake_case -> record boundary.
#
import pytest
from conftest import FakeResponse
from agridatum.api import transform_api_record, transform_api_records
from agridatum.exceptions import BackendError, BackendUnreachable, ContractError
from agridatum.records import HarvestPayload, SubmissionResult

WHEN = '2025-03-01T10:00:00.000Z'
PAYLOAD = HarvestPayload('Maize', 50.0, 'North Field', WHEN, 'f00d')
SIGNED = SubmissionResult(public_key='pk', signature='s'*88, farmer_address='addr_test1xyz')

def test_transform(api_row):
    rec = transform_api_record(api_row)
    assert rec.id == '41'
    assert rec.weight_kg == 12.5
    assert isinstance(rec.weight_kg, float)
    assert rec.phone_number == '+254700000001'
    assert rec.plot_location == 'North Field'
    assert rec.crop_type == 'Maize'
    assert rec.transaction_hash == 'ab'*32
    assert rec.indexed_on_chain is True
    assert rec.farmer_id == 'f00d'
    assert rec.signature == ('ef'*64)[0:32]

def test_transform_nulls(api_row):
    api_row.update(signature=None, transaction_hash=None, indexed_on_chain=False)
    rec = transform_api_record(api_row)
    assert rec.signature is None
    assert rec.transaction_hash is None
    assert not rec.on_chain

def test_records_by_farmer(api, fake_session, api_row):
    second = dict(api_row, id=40, weight_kg='3')
    fake_session.route('GET', '/api/harvest/records/f00d',
                        dict(success=True, data=[api_row, second]))

    rows = api.get_records_by_farmer('f00d', limit=100)
    recs = transform_api_records(rows)
    assert [r.id for r in recs] == ['41', '40']
    assert recs[1].weight_kg == 3.0

    call = fake_session.calls[0]
    assert call['params'] == dict(limit=100, offset=0)

def test_records_unsuccessful(api, fake_session):
    fake_session.route('GET', '/api/harvest/records/f00d', dict(success=False))
    assert api.get_records_by_farmer('f00d') == []

def test_all_records_filters(api, fake_session):
    fake_session.route('GET', '/api/harvest/records', dict(success=True, data=[]))

    assert api.get_all_records(crop_type='Beans', start_date='2025-01-01') == []
    assert fake_session.calls[0]['params'] == dict(cropType='Beans', startDate='2025-01-01',
                                                   limit=100, offset=0)

def test_submit_success(api, fake_session):
    fake_session.route('POST', '/api/harvest/submit',
            dict(success=True, data=dict(id=7),
                 blockchain=dict(submitted=True, transactionHash='abc123')))

    rv = api.submit(PAYLOAD, '+254700000001', SIGNED)
    assert rv.success
    assert rv.error is None

    rec = rv.record
    assert rec.id == '7'
    assert rec.transaction_hash == 'abc123'
    assert rec.indexed_on_chain is True
    assert rec.signature == 's'*32
    assert rec.weight_kg == 50.0
    assert rec.farmer_address == 'addr_test1xyz'

    body = fake_session.calls[0]['json']
    assert body == dict(farmerId='f00d', phoneNumber='+254700000001',
                        plotLocation='North Field', cropType='Maize', weightKg=50,
                        timestamp=WHEN, publicKey='pk', signature='s'*88)

def test_submit_not_on_chain(api, fake_session):
    fake_session.route('POST', '/api/harvest/submit',
            dict(success=True, data=dict(id=8),
                 blockchain=dict(submitted=False, transactionHash=None)))

    rec = api.submit(PAYLOAD, '+254700000001', SIGNED).record
    assert rec.transaction_hash is None
    assert rec.indexed_on_chain is False

def test_submit_http_error(api, fake_session):
    fake_session.route('POST', '/api/harvest/submit',
            FakeResponse(400, dict(message='weightKg must be positive')))

    rv = api.submit(PAYLOAD, '+254700000001', SIGNED)
    assert not rv.success
    assert rv.record is None
    assert rv.error == 'weightKg must be positive'

def test_submit_http_error_no_body(api, fake_session):
    fake_session.route('POST', '/api/harvest/submit', FakeResponse(502, None, text='<html>'))

    rv = api.submit(PAYLOAD, '+254700000001', SIGNED)
    assert rv.error == 'HTTP 502'

def test_submit_unreachable(api, fake_session, unreachable):
    fake_session.route('POST', '/api/harvest/submit', unreachable)

    rv = api.submit(PAYLOAD, '+254700000001', SIGNED)
    assert not rv.success
    assert 'Cannot reach server' in rv.error
    # no retries
    assert len(fake_session.calls) == 1

def test_submit_refused(api, fake_session):
    fake_session.route('POST', '/api/harvest/submit', dict(success=False, error='Duplicate'))

    rv = api.submit(PAYLOAD, '+254700000001', SIGNED)
    assert (rv.success, rv.error) == (False, 'Duplicate')

def test_verify(api, fake_session):
    fake_session.route('POST', '/api/harvest/verify',
            dict(success=True, verification=dict(signatureValid=True, blockchainIndexed=True,
                                                 blockchainValid=True, transactionHash='abc123')))

    v = api.verify_harvest(record_id='7')
    assert v.signature_valid is True
    assert v.blockchain_valid
    assert v.transaction_hash == 'abc123'
    assert fake_session.calls[0]['json'] == dict(recordId=7)

    assert api.verify_transaction('abc123') is True

def test_verify_needs_args(api):
    with pytest.raises(ValueError):
        api.verify_harvest()

def test_verify_bad_contract(api, fake_session):
    fake_session.route('POST', '/api/harvest/verify', dict(success=True))
    with pytest.raises(ContractError):
        api.verify_harvest(transaction_hash='abc123')

    # but the yes/no helper just says no
    assert api.verify_transaction('abc123') is False

def test_bad_json(api, fake_session):
    fake_session.route('GET', '/api/harvest/records/f00d', FakeResponse(200, None, text='nope'))
    with pytest.raises(ContractError) as err:
        api.get_records_by_farmer('f00d')
    assert 'Bad json' in str(err.value)

def test_timeout_passed(fake_session):
    from agridatum.api import HarvestApi
    from agridatum.net import NetConnection

    api = HarvestApi(net=NetConnection('http://backend.test/', timeout=7.5, session=fake_session))
    fake_session.route('POST', '/api/keys/generate', dict(publicKey='x'))
    api.generate_keys('seed')

    call = fake_session.calls[0]
    assert call['timeout'] == 7.5
    assert call['json'] == dict(seedInput='seed')

def test_request_errors_wrapped(api, fake_session):
    import requests
    fake_session.route('POST', '/api/harvest/submit', requests.TooManyRedirects('loop'))
    fake_session.route('POST', '/api/keys/generate', requests.exceptions.InvalidSchema('no adapter'))

    rv = api.submit(PAYLOAD, '+254700000001', SIGNED)
    assert not rv.success
    assert 'loop' in rv.error

    with pytest.raises(BackendError) as err:
        api.generate_keys('seed')
    assert not isinstance(err.value, BackendUnreachable)

@pytest.mark.parametrize('data,chain', [
    ([7], dict(submitted=True, transactionHash='abc123')),
    (7, 'abc123'),
    ('7', None),
])
def test_submit_odd_shapes(api, fake_session, data, chain):
    fake_session.route('POST', '/api/harvest/submit',
            dict(success=True, data=data, blockchain=chain))

    rv = api.submit(PAYLOAD, '+254700000001', SIGNED)
    assert rv.success
    assert rv.record.id.isdigit()
    assert rv.record.weight_kg == 50.0

def test_records_malformed(api, fake_session):
    fake_session.route('GET', '/api/harvest/records/f00d', dict(success=True, data=[None]))
    with pytest.raises(ContractError):
        api.get_records_by_farmer('f00d')

# EOF
