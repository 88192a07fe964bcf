"""
Tests for socks5auth authenticators.
"""

import asyncio

import pytest
from socks5auth import (
    AuthContext,
    AuthenticationFailedError,
    AuthMethod,
    CredentialStore,
    NoAuthAuthenticator,
    StaticCredentials,
    UnsupportedVersionError,
    UserPassAuthenticator,
)


def userpass_request(username: bytes, password: bytes, version: int = 1) -> bytes:
    return (
        bytes([version, len(username)]) + username + bytes([len(password)]) + password
    )


class RecordingStore(CredentialStore):
    """Accepts everyone and remembers what it was asked."""

    def __init__(self):
        self.calls = []

    async def valid(self, ctx, username, password):
        self.calls.append((username, password))
        return ctx.with_payload(audit="checked"), True


class TestNoAuthAuthenticator:
    """Test cases for NoAuthAuthenticator."""

    def test_code(self):
        assert NoAuthAuthenticator().code == 0x00

    @pytest.mark.asyncio
    async def test_writes_selection(self, make_reader, writer):
        reader = make_reader(b"untouched")
        ctx = AuthContext()

        result = await NoAuthAuthenticator().negotiate(ctx, reader, writer)

        assert result is ctx
        assert bytes(writer.buffer) == b"\x05\x00"
        # Nothing is read from the client
        assert await reader.read() == b"untouched"

    @pytest.mark.asyncio
    async def test_write_failure(self, make_reader, broken_writer):
        with pytest.raises(BrokenPipeError):
            await NoAuthAuthenticator().negotiate(
                AuthContext(), make_reader(b""), broken_writer
            )


class TestUserPassAuthenticator:
    """Test cases for UserPassAuthenticator."""

    def test_code(self):
        authenticator = UserPassAuthenticator(StaticCredentials({}))
        assert authenticator.code == AuthMethod.USERNAME_PASSWORD == 0x02

    @pytest.mark.asyncio
    async def test_valid_credentials(self, make_reader, writer):
        authenticator = UserPassAuthenticator(StaticCredentials({"foo": "bar"}))
        reader = make_reader(userpass_request(b"foo", b"bar"))

        ctx = await authenticator.negotiate(AuthContext(), reader, writer)

        assert bytes(writer.buffer) == b"\x05\x02\x01\x00"
        assert ctx.payload["username"] == "foo"
        assert "bar" not in ctx.payload.values()

    @pytest.mark.asyncio
    async def test_invalid_password(self, make_reader, writer):
        authenticator = UserPassAuthenticator(StaticCredentials({"foo": "bar"}))
        reader = make_reader(userpass_request(b"foo", b"baz"))

        with pytest.raises(AuthenticationFailedError) as exc_info:
            await authenticator.negotiate(AuthContext(), reader, writer)

        # The failure status goes out before the error is raised
        assert bytes(writer.buffer) == b"\x05\x02\x01\x01"
        assert exc_info.value.username == "foo"
        assert "username" not in exc_info.value.context.payload

    @pytest.mark.asyncio
    async def test_unknown_user(self, make_reader, writer):
        authenticator = UserPassAuthenticator(StaticCredentials({"foo": "bar"}))
        reader = make_reader(userpass_request(b"nobody", b"bar"))

        with pytest.raises(AuthenticationFailedError):
            await authenticator.negotiate(AuthContext(), reader, writer)
        assert bytes(writer.buffer) == b"\x05\x02\x01\x01"

    @pytest.mark.asyncio
    async def test_empty_username_and_password(self, make_reader, writer):
        authenticator = UserPassAuthenticator(StaticCredentials({"": ""}))
        reader = make_reader(userpass_request(b"", b""))

        ctx = await authenticator.negotiate(AuthContext(), reader, writer)

        assert bytes(writer.buffer) == b"\x05\x02\x01\x00"
        assert ctx.payload["username"] == ""

    @pytest.mark.asyncio
    async def test_max_length_fields(self, make_reader, writer):
        username, password = "u" * 255, "p" * 255
        authenticator = UserPassAuthenticator(
            StaticCredentials({username: password})
        )
        reader = make_reader(userpass_request(username.encode(), password.encode()))

        await authenticator.negotiate(AuthContext(), reader, writer)
        assert bytes(writer.buffer)[-2:] == b"\x01\x00"

    @pytest.mark.asyncio
    async def test_non_utf8_bytes_compare_exactly(self, make_reader, writer):
        raw = b"\xff\xfe"
        password = raw.decode("utf-8", errors="surrogateescape")
        authenticator = UserPassAuthenticator(StaticCredentials({"foo": password}))
        reader = make_reader(userpass_request(b"foo", raw))

        await authenticator.negotiate(AuthContext(), reader, writer)
        assert bytes(writer.buffer)[-2:] == b"\x01\x00"

    @pytest.mark.asyncio
    async def test_bad_subnegotiation_version(self, make_reader, writer):
        authenticator = UserPassAuthenticator(StaticCredentials({"foo": "bar"}))
        reader = make_reader(userpass_request(b"foo", b"bar", version=5))

        with pytest.raises(UnsupportedVersionError) as exc_info:
            await authenticator.negotiate(AuthContext(), reader, writer)

        assert exc_info.value.version == 5
        assert exc_info.value.expected == 1
        # Only the method selection was written; no status byte
        assert bytes(writer.buffer) == b"\x05\x02"

    @pytest.mark.parametrize(
        "data",
        [
            b"",
            b"\x01",
            b"\x01\x03fo",
            b"\x01\x03foo",
            b"\x01\x03foo\x03ba",
        ],
    )
    @pytest.mark.asyncio
    async def test_short_read_is_transport_error(self, make_reader, writer, data):
        store = RecordingStore()
        authenticator = UserPassAuthenticator(store)

        with pytest.raises(asyncio.IncompleteReadError):
            await authenticator.negotiate(AuthContext(), make_reader(data), writer)

        assert store.calls == []
        assert bytes(writer.buffer) == b"\x05\x02"

    @pytest.mark.asyncio
    async def test_store_context_is_kept(self, make_reader, writer):
        store = RecordingStore()
        authenticator = UserPassAuthenticator(store)
        reader = make_reader(userpass_request(b"alice", b"secret"))

        ctx = await authenticator.negotiate(AuthContext(), reader, writer)

        assert store.calls == [("alice", "secret")]
        assert ctx.payload == {"audit": "checked", "username": "alice"}

    @pytest.mark.asyncio
    async def test_single_attempt(self, make_reader, writer):
        authenticator = UserPassAuthenticator(StaticCredentials({"foo": "bar"}))
        data = userpass_request(b"foo", b"bad") + userpass_request(b"foo", b"bar")
        reader = make_reader(data)

        with pytest.raises(AuthenticationFailedError):
            await authenticator.negotiate(AuthContext(), reader, writer)

        # The second attempt is left unread
        assert bytes(writer.buffer) == b"\x05\x02\x01\x01"
        assert await reader.read() == userpass_request(b"foo", b"bar")
