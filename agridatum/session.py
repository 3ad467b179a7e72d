#
# (c) Copyright 2025 by AgriDatum contributors. This file is covered by license found in COPYING.
#
# session.py
#
# One farmer's session: who they are (derived, never stored), the backend and
# signer they talk to, and the records shown to them. Created on login or
# signup, torn down on logout. Nothing here touches disk.
#
import math, logging
from .api import SubmitOutcome, transform_api_records
from .constants import LOGIN_RECORDS_LIMIT
from .exceptions import HarvestValidationError, BackendError
from .identity import derive, validate_pin
from .records import HarvestPayload, RecordStore

logger = logging.getLogger(__name__)

def validate_weight(weight_kg):
    # positive number, given as a number or as text from a form
    if weight_kg is None or weight_kg == '' or isinstance(weight_kg, bool):
        raise HarvestValidationError('All fields are required.')
    try:
        rv = float(weight_kg)
    except (TypeError, ValueError):
        raise HarvestValidationError('Harvest weight must be a positive number.')
    if not math.isfinite(rv) or not (rv > 0):
        raise HarvestValidationError('Harvest weight must be a positive number.')
    return rv

def validate_harvest_form(phone_number, pin, plot_location, crop_type, weight_kg):
    # Checks done before any network traffic. Returns weight as float.
    if not phone_number or not pin or not plot_location or not crop_type \
            or weight_kg is None or weight_kg == '':
        raise HarvestValidationError('All fields are required.')

    weight = validate_weight(weight_kg)
    validate_pin(pin)

    return weight


class FarmerSession:
    #
    # Use login() or signup() to make one of these; logout() when done.
    #
    def __init__(self, identity, phone_number, api, signer, full_name=None):
        self.identity = identity
        self.phone_number = phone_number
        self.full_name = full_name
        self.api = api
        self.signer = signer
        self.store = RecordStore()

    def __repr__(self):
        who = self.farmer_id or '(logged out)'
        return '<%s %s: %d records>' % (self.__class__.__name__, who, len(self.store))

    @property
    def farmer_id(self):
        return self.identity.farmer_id if self.identity else None

    @property
    def is_active(self):
        return self.identity is not None

    @classmethod
    def login(cls, phone_number, pin, api, signer, load_records=True):
        # Existing farmer: derive identity, then pull their records.
        if not phone_number or not pin:
            raise HarvestValidationError('Please enter both phone number and PIN')
        validate_pin(pin)

        rv = cls(derive(phone_number, pin), phone_number, api, signer)
        logger.info("Login for farmer %s", rv.farmer_id)

        if load_records:
            rv.load_records()

        return rv

    @classmethod
    def signup(cls, full_name, phone_number, pin, confirm_pin, api, signer):
        # New farmer: same derivation, but nothing to load yet.
        if not full_name or not phone_number or not pin or not confirm_pin:
            raise HarvestValidationError('All fields are required.')
        validate_pin(pin)
        if pin != confirm_pin:
            raise HarvestValidationError('PINs do not match.')

        rv = cls(derive(phone_number, pin), phone_number, api, signer, full_name=full_name)
        logger.info("Sign up for farmer %s", rv.farmer_id)

        return rv

    def logout(self):
        # drop identity and the local copy of records (backend keeps its own)
        logger.info("Logout for farmer %s", self.farmer_id)
        self.identity = None
        self.phone_number = None
        self.full_name = None
        self.store.clear()

    def _require_active(self):
        if not self.is_active:
            raise RuntimeError("Session has ended; login again.")

    def load_records(self, limit=LOGIN_RECORDS_LIMIT, offset=0):
        # Replace the list with what the backend has. On failure show an
        # empty list rather than stopping the farmer.
        self._require_active()
        try:
            rows = self.api.get_records_by_farmer(self.farmer_id, limit=limit, offset=offset)
            records = transform_api_records(rows)
        except (BackendError, KeyError, TypeError, ValueError) as exc:
            logger.error("Failed to load records for %s: %s", self.farmer_id, exc)
            records = []

        self.store.replace(records)
        logger.info("Loaded %d records for %s", len(records), self.farmer_id)

        return len(records)

    reload = load_records

    def record_harvest(self, pin, plot_location, crop_type, weight_kg, timestamp=None):
        # Whole pipeline: validate -> derive -> sign -> submit -> prepend.
        # - every failure comes back as SubmitOutcome(success=False, error=...)
        # - no record is added unless the backend accepted the submission
        self._require_active()

        try:
            weight = validate_harvest_form(self.phone_number, pin, plot_location,
                                            crop_type, weight_kg)
            ident = derive(self.phone_number, pin)
            if ident.farmer_id != self.farmer_id:
                raise HarvestValidationError('PIN does not match the logged-in farmer.')
        except HarvestValidationError as exc:
            return SubmitOutcome(False, error=str(exc))

        payload = HarvestPayload.build(crop_type, weight, plot_location, ident.farmer_id,
                                            timestamp=timestamp)

        try:
            signed = self.signer.sign(payload, ident.seed_input, phone_number=self.phone_number)
        except BackendError as exc:
            logger.error("Signing failed for %s: %s", self.farmer_id, exc)
            return SubmitOutcome(False, error=str(exc))

        rv = self.api.submit(payload, self.phone_number, signed)

        if rv.success:
            self.store.prepend(rv.record)
            logger.info("Harvest %s recorded for %s (txn: %s)", rv.record.id,
                            self.farmer_id, rv.record.transaction_hash or 'none')
        else:
            logger.error("Submission failed for %s: %s", self.farmer_id, rv.error)

        return rv

# EOF
