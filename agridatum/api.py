#
# (c) Copyright 2025 by AgriDatum contributors. This file is covered by license found in COPYING.
#
# api.py
#
# Backend REST calls for harvests, and the boundary where the backend's
# snake_case rows become our HarvestRecord objects.
#
import time, logging
from collections import namedtuple
from urllib.parse import quote
from .constants import *
from .exceptions import BackendError, ContractError
from .net import NetConnection
from .records import HarvestRecord
from .utils import parse_weight, signature_preview

logger = logging.getLogger(__name__)

# result of one submission; exactly one of record/error is set
SubmitOutcome = namedtuple('SubmitOutcome', 'success record blockchain error',
                           defaults=(None, None, None))

Verification = namedtuple('Verification',
            'signature_valid blockchain_indexed blockchain_valid transaction_hash record',
            defaults=(None,))

def transform_api_record(api):
    # one backend row -> HarvestRecord
    # - weight_kg arrives as a string ("12.50")
    # - signature is cut to a display preview
    return HarvestRecord(
        id=str(api['id']),
        phone_number=api.get('phone_number'),
        plot_location=api.get('plot_location'),
        crop_type=api.get('crop_type'),
        weight_kg=parse_weight(api.get('weight_kg')),
        timestamp=api.get('timestamp'),
        transaction_hash=api.get('transaction_hash'),
        public_key=api.get('public_key'),
        farmer_address=api.get('farmer_address'),
        signature=signature_preview(api.get('signature')),
        indexed_on_chain=api.get('indexed_on_chain'),
        farmer_id=api.get('farmer_id'),
        created_at=api.get('created_at'),
    )

def transform_api_records(rows):
    return [transform_api_record(r) for r in rows]


class HarvestApi:
    #
    # Wrapper for the backend endpoints. Call methods on this instance to get work done.
    #
    def __init__(self, server=None, timeout=None, net=None):
        self.web = net or NetConnection(server, timeout=timeout)

    def __repr__(self):
        return '<%s via %s>' % (self.__class__.__name__, self.web.server)

    @classmethod
    def from_config(cls, config):
        return cls(config.api_url, timeout=config.timeout)

    def generate_keys(self, seed_input, harvest_data=None):
        body = dict(seedInput=seed_input)
        if harvest_data is not None:
            body['harvestData'] = harvest_data
        return self.web.post_json(API_KEYS_GENERATE, body)

    def submit_harvest(self, submission):
        return self.web.post_json(API_HARVEST_SUBMIT, submission)

    def verify_harvest(self, record_id=None, transaction_hash=None):
        # Ask backend to check signature and chain status for one record.
        if not record_id and not transaction_hash:
            raise ValueError('Either record_id or transaction_hash is required')

        body = dict()
        if record_id:
            body['recordId'] = int(record_id) if str(record_id).isdigit() else record_id
        if transaction_hash:
            body['transactionHash'] = transaction_hash

        resp = self.web.post_json(API_HARVEST_VERIFY, body)

        v = resp.get('verification') if isinstance(resp, dict) else None
        if not isinstance(v, dict):
            raise ContractError("Verification response has no 'verification' section")

        return Verification(signature_valid=v.get('signatureValid'),
                            blockchain_indexed=bool(v.get('blockchainIndexed')),
                            blockchain_valid=bool(v.get('blockchainValid')),
                            transaction_hash=v.get('transactionHash'),
                            record=resp.get('record'))

    def verify_transaction(self, txn_hash):
        # True only if backend says the txn is valid on chain; failures are False
        try:
            return self.verify_harvest(transaction_hash=txn_hash).blockchain_valid
        except (BackendError, ValueError) as exc:
            logger.warning("Transaction verification failed: %s", exc)
            return False

    def get_records_by_farmer(self, farmer_id, limit=DEFAULT_PAGE_LIMIT, offset=0):
        path = API_HARVEST_RECORDS + '/' + quote(farmer_id, safe='')
        resp = self.web.get_json(path, params=dict(limit=limit, offset=offset))
        return self._rows(resp)

    def get_all_records(self, crop_type=None, start_date=None, end_date=None,
                                limit=ALL_RECORDS_LIMIT, offset=0):
        params = dict()
        if crop_type:
            params['cropType'] = crop_type
        if start_date:
            params['startDate'] = start_date
        if end_date:
            params['endDate'] = end_date
        params['limit'] = limit or ALL_RECORDS_LIMIT
        params['offset'] = offset or 0

        resp = self.web.get_json(API_HARVEST_RECORDS, params=params)
        return self._rows(resp)

    @staticmethod
    def _rows(resp):
        # list endpoints: {success, data: [...]}; unsuccessful is an empty page
        if not isinstance(resp, dict) or not resp.get('success'):
            return []

        rows = resp.get('data') or []
        if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
            raise ContractError("Malformed record list from backend")

        return list(rows)

    def submit(self, payload, phone_number, signed):
        # Post one signed harvest. Never raises for backend trouble, and
        # never retries: returns a SubmitOutcome with one error string instead.
        submission = dict(payload.harvest_data(phone_number))
        submission['publicKey'] = signed.public_key
        if signed.signature:
            submission['signature'] = signed.signature

        try:
            resp = self.submit_harvest(submission)
        except BackendError as exc:
            return SubmitOutcome(False, error=str(exc))

        if not isinstance(resp, dict):
            return SubmitOutcome(False, error='Unexpected response from backend')

        if not resp.get('success'):
            return SubmitOutcome(False, error=resp.get('error') or resp.get('message')
                                                or 'Backend submission failed')

        data = resp.get('data')
        if not isinstance(data, dict):
            data = {}
        chain = resp.get('blockchain')
        if not isinstance(chain, dict):
            chain = {}

        rec_id = data.get('id')
        if rec_id is None:
            rec_id = int(time.time() * 1000)

        if 'submitted' in chain:
            indexed = bool(chain['submitted'])
        else:
            indexed = data.get('indexed_on_chain')

        txn = chain.get('transactionHash') or data.get('transaction_hash') \
                    or signed.transaction_hash

        record = HarvestRecord(
            id=str(rec_id),
            phone_number=phone_number,
            plot_location=payload.location_text,
            crop_type=payload.crop_type,
            weight_kg=payload.weight_kg,
            timestamp=payload.timestamp,
            transaction_hash=txn,
            public_key=signed.public_key,
            farmer_address=signed.farmer_address,
            signature=signature_preview(signed.signature),
            indexed_on_chain=indexed,
            farmer_id=payload.farmer_id,
            created_at=data.get('created_at'),
        )

        return SubmitOutcome(True, record=record, blockchain=chain or None)

# EOF
