"""Shared fixtures and HTTP doubles for the f5sdk test suite."""

from __future__ import annotations

import json
import threading
import time
from collections import defaultdict, deque
from urllib.parse import urlsplit

import pytest
import requests

from f5sdk.management_client import ManagementClient

DEFAULT_HOST = '192.0.2.1'
DEFAULT_USER = 'admin'
DEFAULT_PASSWORD = 'admin'
LOGIN_URI = '/mgmt/shared/authn/login'


def fake_token(token='ABCDEFGHIJKLMNOPQRSTUVWXYZ', timeout=1200):
    return {'token': {'token': token, 'timeout': timeout}}


class FakeResponse:
    """Minimal ``requests.Response`` double."""

    def __init__(self, status_code: int = 200, body=None, headers=None) -> None:
        self.status_code = status_code
        self.headers = dict(headers or {})
        if body is None:
            self.content = b''
        elif isinstance(body, bytes):
            self.content = body
        elif isinstance(body, str):
            self.content = body.encode('utf-8')
        else:
            self.content = json.dumps(body).encode('utf-8')
        self.text = self.content.decode('utf-8', errors='replace')

    def json(self):
        return json.loads(self.text)

    def iter_content(self, chunk_size=8192):
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i:i + chunk_size]

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Session double that replays queued responses per (method, path or url).

    A response registered with ``repeat=True`` is served for every matching
    call instead of being consumed.
    """

    def __init__(self) -> None:
        self.verify = False
        self.calls = []
        self._queues = defaultdict(deque)
        self._repeat = {}
        self._lock = threading.Lock()

    def add(self, method, target, status=200, body=None, headers=None, repeat=False,
            delay=0.0, exc=None):
        entry = (FakeResponse(status, body, headers), delay, exc)
        key = (method.upper(), target)
        if repeat:
            self._repeat[key] = entry
        else:
            self._queues[key].append(entry)
        return self

    def add_login(self, token='ABCDEFGHIJKLMNOPQRSTUVWXYZ', timeout=1200, **kwargs):
        return self.add('POST', LOGIN_URI, 200, fake_token(token, timeout), **kwargs)

    def request(self, method, url, headers=None, json=None, data=None, timeout=None, **kwargs):
        method = method.upper()
        parts = urlsplit(url)
        path = parts.path + (f"?{parts.query}" if parts.query else '')
        full = f"{parts.scheme}://{parts.netloc}{parts.path}"

        with self._lock:
            self.calls.append({
                'method': method,
                'url': url,
                'path': path,
                'headers': dict(headers or {}),
                'json': json,
                'data': data,
                'timeout': timeout,
            })
            entry = None
            for key in ((method, full), (method, path)):
                if self._queues.get(key):
                    entry = self._queues[key].popleft()
                    break
                if key in self._repeat:
                    entry = self._repeat[key]
                    break

        if entry is None:
            raise AssertionError(f"Unexpected request: {method} {url}")

        response, delay, exc = entry
        if delay:
            time.sleep(delay)
        if exc is not None:
            raise exc
        return response

    def get(self, url, **kwargs):
        kwargs.pop('stream', None)
        return self.request('GET', url, **kwargs)

    def pending(self):
        return {key: len(queue) for key, queue in self._queues.items() if queue}

    def calls_to(self, method, path):
        return [c for c in self.calls if c['method'] == method.upper() and c['path'] == path]


class FakeClock:
    """Monotonic clock double advanced explicitly by tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def session():
    fake = FakeSession()
    yield fake
    assert not fake.pending(), f"Not all queued responses were used: {fake.pending()}"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mgmt_client(session, clock):
    return ManagementClient(
        DEFAULT_HOST,
        DEFAULT_USER,
        DEFAULT_PASSWORD,
        session=session,
        clock=clock
    )
