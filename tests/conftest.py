"""Shared fixtures for socks5auth tests."""

import asyncio

import pytest


class FakeWriter:
    """Minimal stand-in for asyncio.StreamWriter that captures written bytes."""

    def __init__(self, fail_with=None):
        self.buffer = bytearray()
        self.fail_with = fail_with

    def write(self, data: bytes) -> None:
        self.buffer.extend(data)

    async def drain(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with


def feed_reader(data: bytes) -> asyncio.StreamReader:
    """Create a StreamReader pre-loaded with data followed by EOF."""
    reader = asyncio.StreamReader()
    reader.feed_data(data)
    reader.feed_eof()
    return reader


@pytest.fixture
def writer():
    return FakeWriter()


@pytest.fixture
def make_reader():
    return feed_reader


@pytest.fixture
def broken_writer():
    return FakeWriter(fail_with=BrokenPipeError("broken pipe"))


@pytest.fixture
def make_writer():
    return FakeWriter
