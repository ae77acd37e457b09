import json
import os
import sys

import pytest
import requests

# Add project root to Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from tagias import Tagias


def make_response(status_code=200, body=None, text=None):
    resp = requests.Response()
    resp.status_code = status_code
    if text is not None:
        resp._content = text.encode("utf-8")
    else:
        resp._content = json.dumps(body if body is not None else {}).encode("utf-8")
    resp.headers["Content-Type"] = "application/json"
    resp.url = "https://p.tagias.com/api/v2/tagias"
    return resp


class FakeSession:
    """Stands in for requests.Session.request, recording every call."""

    def __init__(self):
        self.calls = []
        self.response = make_response(body={"status": "ok"})

    def reply(self, status_code=200, body=None, text=None):
        self.response = make_response(status_code, body, text)

    def __call__(self, method, url, json=None, headers=None, timeout=None):
        self.calls.append({"method": method, "url": url, "json": json, "timeout": timeout})
        return self.response


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def client(fake_session, monkeypatch):
    monkeypatch.delenv("TAGIAS_URL", raising=False)
    monkeypatch.delenv("TAGIAS_TIMEOUT", raising=False)
    tagias = Tagias("test-api-key")
    monkeypatch.setattr(tagias.transport.session, "request", fake_session)
    yield tagias
    tagias.close()
