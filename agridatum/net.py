#
# (c) Copyright 2025 by AgriDatum contributors. This file is covered by license found in COPYING.
#
# net.py
#
# JSON over HTTP to the AgriDatum backend.
#
# - Requires 'requests' module
# - HTTP_PROXY / HTTPS_PROXY in environment are honoured by requests itself
# - no retries, no backoff: a failed request is reported once, to the caller
#
import sys, logging
from pprint import pformat
from .constants import DEFAULT_SERVER
from .exceptions import BackendError, BackendUnreachable, ContractError

# Change this to see traffic details
VERBOSE = False

logger = logging.getLogger(__name__)

class NetConnection:

    def __init__(self, server=None, timeout=None, session=None):
        import requests
        self.ses = session if session is not None else requests.Session()
        self.server = (server or DEFAULT_SERVER).rstrip('/')
        self.timeout = timeout
        assert not self.server.endswith('/')

    def __repr__(self):
        return '<%s %s>' % (self.__class__.__name__, self.server)

    def _send(self, method, path, **kws):
        # round-trip one request, return decoded JSON body
        # - raises BackendUnreachable when there is no response at all
        # - raises BackendError on any non-2xx status
        import requests

        assert path[0] == '/'
        url = self.server + path

        if VERBOSE:
            print(f">> {method} {url}", file=sys.stderr)
            if 'json' in kws:
                print(pformat(kws['json']), file=sys.stderr)

        try:
            r = self.ses.request(method, url, timeout=self.timeout, **kws)
        except (requests.ConnectionError, requests.Timeout) as exc:
            logger.warning("No response from %s: %s", url, exc)
            raise BackendUnreachable(f"Cannot reach server at {self.server}", None, str(exc))
        except requests.RequestException as exc:
            # bad URL in config, redirect loops, broken bodies
            logger.error("%s %s failed: %s", method, url, exc)
            raise BackendError(f"Request to {self.server} failed: {exc}", None, str(exc))

        if VERBOSE:
            print(f"<< {r.status_code} {r.text[0:400]}", file=sys.stderr)

        if not (200 <= r.status_code < 300):
            msg = self.error_message(r)
            logger.error("%s %s failed: HTTP %d: %s", method, path, r.status_code, msg)
            raise BackendError(msg, r.status_code, r.text)

        try:
            return r.json()
        except ValueError:
            raise ContractError("Bad json from server: " + r.text[0:200], r.status_code, r.text)

    @staticmethod
    def error_message(r):
        # best human text for a failed response: body 'error', then 'message', then status
        try:
            body = r.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            msg = body.get('error') or body.get('message')
            if msg:
                return str(msg)

        return f'HTTP {r.status_code}'

    def get_json(self, path, params=None):
        # fetch a JSON response
        return self._send('GET', path, params=params)

    def post_json(self, path, body):
        # send JSON, get JSON
        return self._send('POST', path, json=body)

# EOF
