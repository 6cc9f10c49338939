"""Pytest configuration and shared fixtures"""
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from freebox_client import FreeboxApi
from freebox_models import ApiVersion


API_VERSION_RESPONSE = {
    "box_model_name": "Freebox v7 (r1)",
    "api_base_url": "/api/",
    "https_port": 12345,
    "device_name": "Freebox Server",
    "https_available": True,
    "box_model": "fbxgw7-r1",
    "api_domain": "abcdefgh.fbxos.fr",
    "uid": "0123456789abcdef0123456789abcdef",
    "api_version": "10.2",
    "device_type": "FreeboxServer7,1",
}

BASE_URL = "https://abcdefgh.fbxos.fr:12345/api/v10/"


class FakeHttpClient:
    """
    In-memory ApiClient: routes map a URL to a result, an exception to raise,
    a callable(method, url, payload, headers) computing the answer, or a list
    of results/exceptions consumed one call at a time.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def __answer(self, method, url, payload, headers):
        self.calls.append((method, url, payload, dict(headers or {})))
        if url not in self.routes:
            raise AssertionError(f"unexpected {method} {url}")
        answer = self.routes[url]
        if isinstance(answer, list) and answer and isinstance(answer[0], (Exception, _Answer)):
            answer = answer.pop(0) if len(answer) > 1 else answer[0]
        if isinstance(answer, _Answer):
            answer = answer.value
        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            return answer(method, url, payload, headers)
        return answer

    def get(self, url, headers=None):
        return self.__answer("GET", url, None, headers)

    def post(self, url, payload=None, headers=None):
        return self.__answer("POST", url, payload, headers)

    def calls_to(self, url):
        return [c for c in self.calls if c[1] == url]


class _Answer:
    """Wraps one answer of a sequence when the answer itself is a list."""

    def __init__(self, value):
        self.value = value


def answers(*values):
    """Sequence of answers for FakeHttpClient, the last one repeats."""
    return [v if isinstance(v, Exception) else _Answer(v) for v in values]


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def api_version():
    return ApiVersion.from_dict(API_VERSION_RESPONSE)


@pytest.fixture
def api(api_version):
    return FreeboxApi.negotiate(api_version)


@pytest.fixture
def fake_clock():
    return FakeClock()
