"""Shared fixtures: an in-memory transport for dispatcher tests."""

from __future__ import annotations

import json

import anyio
import pytest


class FakeTransport:
    """Records everything the dispatcher writes."""

    def __init__(self, *chunks: str, delay: float = 0.0) -> None:
        self.chunks = list(chunks)
        self.delay = delay
        self.received = False
        self.heads: list[tuple[int, dict | None]] = []
        self.bodies: list[str] = []

    async def receive(self):
        self.received = True
        for chunk in self.chunks:
            if self.delay:
                await anyio.sleep(self.delay)
            yield chunk

    def write_head(self, status, headers=None):
        self.heads.append((status, dict(headers) if headers else None))

    def end(self, body=""):
        self.bodies.append(body)

    # -- Assertions helpers --------------------------------------------
    @property
    def status(self) -> int:
        assert len(self.heads) == 1, self.heads
        return self.heads[0][0]

    @property
    def body(self) -> str:
        assert len(self.bodies) == 1, self.bodies
        return self.bodies[0]

    def json(self):
        return json.loads(self.body)


@pytest.fixture
def make_transport():
    def factory(payload, *, delay: float = 0.0) -> FakeTransport:
        text = payload if isinstance(payload, str) else json.dumps(payload)
        return FakeTransport(text, delay=delay)

    return factory
