#
# (c) Copyright 2025 by AgriDatum contributors. This file is covered by license found in COPYING.
#
import json
import pytest
from urllib.parse import urlsplit

SERVER = 'http://backend.test'

class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else json.dumps(body)

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body

class FakeSession:
    # Stands in for requests.Session: answers from a table of routes
    # keyed by (METHOD, path) and remembers every request made.
    def __init__(self):
        self.routes = dict()
        self.calls = []

    def route(self, method, path, answer):
        # answer: FakeResponse, dict (=> 200 JSON), exception, or callable(call)
        self.routes[(method, path)] = answer

    def request(self, method, url, timeout=None, **kws):
        path = urlsplit(url).path
        call = dict(method=method, path=path, timeout=timeout, **kws)
        self.calls.append(call)

        answer = self.routes.get((method, path))
        if answer is None:
            return FakeResponse(404, dict(error=f'no route: {method} {path}'))
        if callable(answer) and not isinstance(answer, type):
            answer = answer(call)
        if isinstance(answer, BaseException):
            raise answer
        if isinstance(answer, dict):
            return FakeResponse(200, answer)
        return answer

    def paths(self):
        return [c['path'] for c in self.calls]

@pytest.fixture
def fake_session():
    return FakeSession()

@pytest.fixture
def api(fake_session):
    from agridatum.api import HarvestApi
    from agridatum.net import NetConnection
    return HarvestApi(net=NetConnection(SERVER, session=fake_session))

@pytest.fixture
def unreachable():
    import requests
    return requests.ConnectionError('connection refused')

# sample backend row, as the records endpoint sends it
@pytest.fixture
def api_row():
    return dict(id=41, farmer_id='f00d', phone_number='+254700000001',
                plot_location='North Field', crop_type='Maize', weight_kg='12.50',
                timestamp='2025-03-01T10:00:00.000Z', transaction_hash='ab'*32,
                farmer_address='addr_test1qxyz', indexed_on_chain=True,
                created_at='2025-03-01T10:00:01.000Z', public_key='cd'*32,
                signature='ef'*64)

# EOF
