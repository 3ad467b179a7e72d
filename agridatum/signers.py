#
# (c) Copyright 2025 by AgriDatum contributors. This file is covered by license found in COPYING.
#
# signers.py
#
# Choice of key/signature providers. AKA where the signature comes from.
#
# My standards:
# - sign(payload, seed_input) returns a SubmissionResult, or raises
# - same inputs, same outputs: no counters, no nonces, no clocks in here
# - public key, address and signature are hex/text, never bytes
# - a missing field from the backend is an error, never filled in locally
#
# Strategies are picked once from config, as an ordered list. Only
# BackendUnreachable moves on to the next strategy; any other failure
# (bad HTTP status, contract violation) stops the whole submission.
#
import logging
from .constants import *
from .exceptions import BackendUnreachable, ContractError
from .records import SubmissionResult
from .utils import sha256_hex

logger = logging.getLogger(__name__)

class SignerABC:
    #
    # Abstract base class.
    #
    name = None

    def sign(self, payload, seed_input, phone_number=None):
        # return SubmissionResult for the payload
        raise NotImplementedError

    def __repr__(self):
        return '<%s>' % self.__class__.__name__


class RemoteSigner(SignerABC):
    #
    # Backend derives the keypair from seed_input and signs for us.
    #
    name = SIGNER_REMOTE

    def __init__(self, api):
        self.api = api

    def sign(self, payload, seed_input, phone_number=None):
        harvest_data = payload.harvest_data(phone_number)
        resp = self.api.generate_keys(seed_input, harvest_data)

        if not isinstance(resp, dict):
            raise ContractError("Key generation failed: unexpected response from backend")

        for fld, label in [('signature', 'a signature'),
                           ('publicKey', 'a public key'),
                           ('farmerAddress', 'a farmer address')]:
            if not resp.get(fld):
                raise ContractError(f"Key generation failed: backend did not return {label}")

        return SubmissionResult(public_key=resp['publicKey'],
                                signature=resp['signature'],
                                farmer_address=resp['farmerAddress'])


class LocalSigner(SignerABC):
    #
    # Offline mode: digests only. Looks like key material but is not
    # verifiable under any public-key scheme, and never claims a txn hash.
    #
    name = SIGNER_LOCAL

    def sign(self, payload, seed_input, phone_number=None):
        public_key = sha256_hex(seed_input + LOCAL_PUBKEY_SUFFIX)
        body = sha256_hex(seed_input + LOCAL_ADDRESS_SUFFIX)[0:LOCAL_ADDRESS_BODY_LENGTH]
        signature = sha256_hex(payload.serialize() + seed_input)

        return SubmissionResult(public_key=public_key,
                                signature=signature,
                                farmer_address=LOCAL_ADDRESS_PREFIX + body,
                                transaction_hash=None)


class SignerChain(SignerABC):
    #
    # Ordered list of strategies; first one that answers wins.
    #
    def __init__(self, signers):
        assert signers, "need at least one signer"
        self.signers = list(signers)
        self.last_used = None

    @property
    def name(self):
        return ','.join(s.name for s in self.signers)

    def __repr__(self):
        return '<%s %s>' % (self.__class__.__name__, self.name)

    def sign(self, payload, seed_input, phone_number=None):
        last_err = None

        for signer in self.signers:
            try:
                rv = signer.sign(payload, seed_input, phone_number=phone_number)
            except BackendUnreachable as exc:
                logger.warning("Signer '%s' unreachable (%s), trying next", signer.name, exc)
                last_err = exc
                continue

            self.last_used = signer.name
            logger.info("Signed harvest for %s using '%s' signer", payload.farmer_id, signer.name)
            return rv

        raise last_err


def pick_signer(names, api=None):
    # Build the chain once, from config values like ('remote', 'local')
    rv = []
    for name in names:
        if name == SIGNER_REMOTE:
            if api is None:
                raise ValueError("remote signer needs a backend connection")
            rv.append(RemoteSigner(api))
        elif name == SIGNER_LOCAL:
            rv.append(LocalSigner())
        else:
            raise ValueError(f"Unknown signer: {name}")

    return SignerChain(rv)

# EOF
