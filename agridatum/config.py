#
# (c) Copyright 2025 by AgriDatum contributors. This file is covered by license found in COPYING.
#
# config.py
#
# Deployment configuration: read once at startup, from environment (and a
# .env file if present), then overridden by command line options.
#
import os
from collections import namedtuple
from .constants import *

Config = namedtuple('Config', 'api_url signers timeout')

def parse_signers(value):
    # "remote", "local" or an ordered list: "remote,local"
    if not value:
        return DEFAULT_SIGNERS

    if isinstance(value, str):
        value = value.split(',')

    rv = []
    for name in value:
        name = name.strip().lower()
        if not name:
            continue
        if name not in KNOWN_SIGNERS:
            raise ValueError(f"Unknown signer: {name} (want one of: {', '.join(KNOWN_SIGNERS)})")
        if name in rv:
            raise ValueError(f"Signer listed twice: {name}")
        rv.append(name)

    if not rv:
        return DEFAULT_SIGNERS

    return tuple(rv)

def parse_timeout(value):
    # None means wait forever; that is also the default
    if value in (None, ''):
        return None
    rv = float(value)
    if rv <= 0:
        raise ValueError("Timeout must be positive (seconds)")
    return rv

def load_config(environ=None, use_dotenv=True, **overrides):
    # Build config from environment, then apply any non-None overrides.
    if environ is None:
        if use_dotenv:
            from dotenv import load_dotenv
            load_dotenv()
        environ = os.environ

    api_url = overrides.get('api_url') or environ.get(ENV_API_URL) or DEFAULT_SERVER
    api_url = api_url.rstrip('/')

    signers = overrides.get('signers') or environ.get(ENV_SIGNER)

    timeout = overrides.get('timeout')
    if timeout is None:
        timeout = environ.get(ENV_TIMEOUT)

    return Config(api_url=api_url, signers=parse_signers(signers),
                    timeout=parse_timeout(timeout))

# EOF
