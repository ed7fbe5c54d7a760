"""
Unit tests for Stream.
"""

import socket
import threading
import time

import pytest

from tinyhttp.core import Stream, StreamState
from tinyhttp.errors import ReadError, WriteError

from conftest import FakeSocket, recv_all


class TricklingSocket(FakeSocket):
    """A peer that never stops sending, one byte at a time."""

    def recv(self, size: int) -> bytes:
        time.sleep(0.01)
        return b"x"


class TestStreamRead:
    """Tests for Stream.read()."""

    def test_returns_sent_bytes(self, stream_pair):
        stream, client = stream_pair
        client.sendall(b"GET / \r\n\r\n")

        assert stream.read() == b"GET / \r\n\r\n"
        assert stream.state == StreamState.READING

    def test_any_bytes_accepted(self, stream_pair):
        """The request is never interpreted."""
        stream, client = stream_pair
        client.sendall(b"\x00\xffnot http at all")

        assert stream.read() == b"\x00\xffnot http at all"

    def test_peer_close_returns_empty(self, stream_pair):
        stream, client = stream_pair
        client.shutdown(socket.SHUT_WR)

        assert stream.read() == b""

    def test_single_read_respects_buffer_size(self):
        fake = FakeSocket(recv_data=b"abcdef")
        stream = Stream(socket=fake, address=("127.0.0.1", 1), buffer_size=4)

        assert stream.read() == b"abcd"

    def test_reset_raises_read_error(self):
        fake = FakeSocket(recv_error=ConnectionResetError("reset"))
        stream = Stream(socket=fake, address=("127.0.0.1", 1))

        with pytest.raises(ReadError):
            stream.read()

    def test_timeout_raises_read_error(self):
        server_side, client_side = socket.socketpair()
        stream = Stream(socket=server_side, address=("127.0.0.1", 1), read_timeout=0.05, drain_timeout=0.01)

        try:
            with pytest.raises(ReadError):
                stream.read()
        finally:
            stream.close()
            client_side.close()


class TestStreamWrite:
    """Tests for Stream.write()."""

    def test_writes_everything(self, stream_pair):
        stream, client = stream_pair
        payload = b"x" * 100_000

        client.settimeout(5.0)
        received = bytearray()
        # sendall blocks once the socket buffer fills, so read concurrently
        reader = threading.Thread(target=lambda: received.extend(recv_all(client)))
        reader.start()

        stream.write(payload)
        stream.close()
        reader.join(timeout=5.0)

        assert bytes(received) == payload

    def test_broken_pipe_raises_write_error(self):
        fake = FakeSocket(send_error=BrokenPipeError("broken"))
        stream = Stream(socket=fake, address=("127.0.0.1", 1))

        with pytest.raises(WriteError):
            stream.write(b"data")


class TestStreamClose:
    """Tests for Stream.close()."""

    def test_drain_is_bounded_for_trickling_peer(self):
        """A peer that keeps sending can't hold close() past drain_timeout."""
        fake = TricklingSocket()
        stream = Stream(socket=fake, address=("127.0.0.1", 1), drain_timeout=0.1)

        started = time.monotonic()
        stream.close()

        assert time.monotonic() - started < 1.0
        assert stream.closed
        assert fake.close_calls == 1

    def test_close_is_idempotent(self):
        fake = FakeSocket()
        stream = Stream(socket=fake, address=("127.0.0.1", 1))

        stream.close()
        stream.close()

        assert stream.closed
        assert fake.close_calls == 1
        assert fake.shutdown_calls == 1

    def test_context_manager_closes_on_error(self):
        fake = FakeSocket()
        stream = Stream(socket=fake, address=("127.0.0.1", 1))

        with pytest.raises(RuntimeError):
            with stream:
                raise RuntimeError("boom")

        assert stream.state == StreamState.CLOSED
        assert fake.close_calls == 1

    def test_peer_sees_eof(self, stream_pair):
        stream, client = stream_pair
        stream.write(b"bye")
        client.shutdown(socket.SHUT_WR)
        stream.close()

        assert recv_all(client) == b"bye"

    def test_properties(self):
        stream = Stream(socket=FakeSocket(), address=("10.0.0.5", 4242))

        assert stream.client_ip == "10.0.0.5"
        assert stream.client_port == 4242
        assert len(stream.id) == 8
        assert stream.age >= 0
