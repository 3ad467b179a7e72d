#
# (c) Copyright 2025 by AgriDatum contributors. This file is covered by license found in COPYING.
#
# records.py
#
# Harvest payloads, signing results and the records shown to the farmer.
#
import json
from collections import namedtuple
from datetime import date
from .constants import EXPORT_FILENAME_TEMPLATE
from .utils import js_number, compact_json, iso_timestamp

class HarvestPayload(namedtuple('HarvestPayload',
                                'crop_type weight_kg location_text timestamp farmer_id')):
    # What gets signed. Built fresh for each submission; never changed after.
    __slots__ = ()

    @classmethod
    def build(cls, crop_type, weight_kg, location_text, farmer_id, timestamp=None):
        return cls(crop_type, weight_kg, location_text, timestamp or iso_timestamp(), farmer_id)

    def as_json(self):
        # key order matters: signatures are taken over the serialized form
        return dict(cropType=self.crop_type,
                    weightKg=js_number(self.weight_kg),
                    locationText=self.location_text,
                    timestamp=self.timestamp,
                    farmerId=self.farmer_id)

    def serialize(self):
        return compact_json(self.as_json())

    def harvest_data(self, phone_number=None):
        # same fields, named the way the submit endpoint names them
        return dict(farmerId=self.farmer_id,
                    phoneNumber=phone_number,
                    plotLocation=self.location_text,
                    cropType=self.crop_type,
                    weightKg=js_number(self.weight_kg),
                    timestamp=self.timestamp)


# transaction_hash stays None unless something was put on chain
SubmissionResult = namedtuple('SubmissionResult',
                              'public_key signature farmer_address transaction_hash',
                              defaults=(None,))

# (python name, exported name)
RECORD_FIELDS = [
    ( 'id', 'id' ),
    ( 'phone_number', 'phoneNumber' ),
    ( 'plot_location', 'plotLocation' ),
    ( 'crop_type', 'cropType' ),
    ( 'weight_kg', 'weightKg' ),
    ( 'timestamp', 'timestamp' ),
    ( 'transaction_hash', 'transactionHash' ),
    ( 'public_key', 'publicKey' ),
    ( 'farmer_address', 'farmerAddress' ),
    ( 'signature', 'signature' ),
    ( 'indexed_on_chain', 'indexedOnChain' ),
    ( 'farmer_id', 'farmerId' ),
    ( 'created_at', 'createdAt' ),
]

_BaseRecord = namedtuple('HarvestRecord', [a for a,_ in RECORD_FIELDS],
                         defaults=(None,)*7)

class HarvestRecord(_BaseRecord):
    # One reported harvest plus its signing/submission metadata.
    # - 'signature' is a display preview only
    __slots__ = ()

    def as_json(self):
        # camelCase, skipping fields we never learned
        rv = dict()
        for attr, key in RECORD_FIELDS:
            val = getattr(self, attr)
            if val is None and attr in ('indexed_on_chain', 'farmer_id', 'created_at'):
                continue
            rv[key] = val
        return rv

    @property
    def on_chain(self):
        return bool(self.transaction_hash)


class RecordStore:
    #
    # Ordered, in-memory list of records for one session. Newest first.
    #
    # - no de-duplication: a fresh submission and a reloaded copy may coexist
    #
    def __init__(self, records=None):
        self._records = list(records or [])

    def __len__(self):
        return len(self._records)

    def __iter__(self):
        return iter(list(self._records))

    def __getitem__(self, idx):
        return self._records[idx]

    def __repr__(self):
        return '<%s: %d records>' % (self.__class__.__name__, len(self._records))

    def prepend(self, record):
        # fresh submission goes on top
        self._records.insert(0, record)

    def replace(self, records):
        # bulk load keeps the order the backend gave us
        self._records = list(records)

    def clear(self):
        self._records = []

    def export_json(self):
        return json.dumps([r.as_json() for r in self._records], indent=2)

    @staticmethod
    def export_filename(day=None):
        day = day or date.today()
        return EXPORT_FILENAME_TEMPLATE.format(day=day.isoformat())

# EOF
