"""Shared fixtures: a stub transport that records requests and replays canned responses."""

import json

import pytest

from NetConnect import BaseTransport, HTTPResponse


class StubTransport(BaseTransport):
    """Returns queued responses (or raises queued exceptions) and records every request."""

    def __init__(self):
        self.requests = []
        self.replies = []
        self.closed = False

    def reply(self, status_code=200, body=b"", headers=None, elapsed=0.0):
        if not isinstance(body, (bytes, bytearray)):
            body = json.dumps(body).encode("utf-8")
        self.replies.append(HTTPResponse(status_code=status_code, headers=headers or {}, body=body,
                                         elapsed=elapsed))
        return self

    def reply_raw(self, value):
        """Queue something that is not an HTTPResponse."""
        self.replies.append(value)
        return self

    async def send(self, request):
        self.requests.append(request)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, HTTPResponse):
            reply.request = request
        return reply

    async def close(self):
        self.closed = True

    @property
    def last_request(self):
        return self.requests[-1]


@pytest.fixture
def transport():
    return StubTransport()
