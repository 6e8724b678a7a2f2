"""Tests for the client-side nonce search."""

import hashlib
import threading
import time

import pytest

from wow.cancellation import Cancelled, CancelToken, DeadlineExceeded
from wow.errors import SearchExhausted
from wow.services.bits import has_leading_zero_bits
from wow.services.solver import MAX_COUNTER, solve


class TestSolve:
    def test_returns_eight_byte_solution(self):
        prefix = b"test prefix data"
        nonce = solve(prefix, 12, CancelToken(timeout=10))

        assert len(nonce) == 8
        assert has_leading_zero_bits(hashlib.sha256(prefix + nonce).digest(), 12)

    def test_sixteen_bits_means_two_zero_bytes(self):
        prefix = b"test prefix data"
        nonce = solve(prefix, 16, CancelToken(timeout=30))

        assert hashlib.sha256(prefix + nonce).digest()[:2] == b"\x00\x00"

    def test_returns_first_matching_counter(self):
        """The counter is little-endian and starts at zero."""
        prefix = b"ordering"
        nonce = solve(prefix, 8)
        found = int.from_bytes(nonce, "little")

        for counter in range(found):
            candidate = counter.to_bytes(8, "little")
            assert not has_leading_zero_bits(hashlib.sha256(prefix + candidate).digest(), 8)

    def test_zero_difficulty_accepts_first_counter(self):
        assert solve(b"anything", 0) == b"\x00" * 8

    def test_start_resumes_search(self):
        assert solve(b"anything", 0, start=5) == (5).to_bytes(8, "little")

    def test_start_out_of_range(self):
        with pytest.raises(ValueError):
            solve(b"x", 0, start=MAX_COUNTER + 1)

    def test_counter_overflow_raises_instead_of_wrapping(self):
        with pytest.raises(SearchExhausted):
            solve(b"x", 256, start=MAX_COUNTER)


class TestSolveCancellation:
    def test_deadline_exceeded(self):
        """Difficulty 32 cannot be solved within one second."""
        token = CancelToken(timeout=1.0)
        started = time.monotonic()

        with pytest.raises(DeadlineExceeded):
            solve(b"test prefix", 32, token)

        assert time.monotonic() - started < 5

    def test_explicit_cancel(self):
        token = CancelToken()
        timer = threading.Timer(0.3, token.cancel)
        timer.start()
        try:
            with pytest.raises(Cancelled) as exc_info:
                solve(b"test prefix", 32, token)
        finally:
            timer.cancel()

        assert not isinstance(exc_info.value, DeadlineExceeded)

    def test_already_cancelled_token_stops_before_hashing(self):
        token = CancelToken()
        token.cancel()

        with pytest.raises(Cancelled):
            solve(b"x", 0, token)

    def test_parent_cancellation_reaches_solver(self):
        parent = CancelToken()
        child = parent.child(timeout=30)
        timer = threading.Timer(0.2, parent.cancel)
        timer.start()
        try:
            with pytest.raises(Cancelled):
                solve(b"test prefix", 32, child)
        finally:
            timer.cancel()
