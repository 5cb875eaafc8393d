"""Unit tests for client identification."""

from __future__ import annotations

import pytest

from throttle.core.client_identity import (
    UNKNOWN,
    USER_AGENT_MAX_CHARS,
    ClientKey,
    build_client_key,
    identify_client,
)


class TestIdentifyClient:
    def test_uses_peer_address_without_forwarded_header(self, request_factory) -> None:
        key = identify_client(request_factory(peer="10.0.0.7", user_agent="curl/8.0"))
        assert key == ClientKey("10.0.0.7", "curl/8.0")

    def test_prefers_first_forwarded_address(self, request_factory) -> None:
        request = request_factory(peer="10.0.0.1", forwarded_for=" 203.0.113.9 , 10.0.0.1")
        assert identify_client(request).address == "203.0.113.9"

    def test_ignores_forwarded_header_when_not_trusted(self, request_factory) -> None:
        request = request_factory(peer="10.0.0.1", forwarded_for="203.0.113.9")
        assert identify_client(request, trust_forwarded_for=False).address == "10.0.0.1"

    def test_blank_forwarded_entry_falls_back_to_peer(self, request_factory) -> None:
        request = request_factory(peer="10.0.0.1", forwarded_for=" , 203.0.113.9")
        assert identify_client(request).address == "10.0.0.1"

    def test_no_address_at_all_uses_unknown_bucket(self, request_factory) -> None:
        key = identify_client(request_factory(peer=None, user_agent=None))
        assert key == ClientKey(UNKNOWN, UNKNOWN)

    def test_empty_user_agent_is_kept_empty(self, request_factory) -> None:
        key = identify_client(request_factory(user_agent=""))
        assert key.agent == ""

    def test_user_agent_is_truncated(self, request_factory) -> None:
        key = identify_client(request_factory(user_agent="A" * 300))
        assert key.agent == "A" * USER_AGENT_MAX_CHARS

    def test_is_deterministic(self, request_factory) -> None:
        first = identify_client(request_factory(peer="::1", user_agent="ua"))
        second = identify_client(request_factory(peer="::1", user_agent="ua"))
        assert first == second
        assert hash(first) == hash(second)


class TestClientKey:
    def test_ipv6_and_crafted_agents_do_not_collide(self) -> None:
        # Joined with "-" or ":" these would render identically.
        a = build_client_key("2001:db8::1", "x-y")
        b = build_client_key("2001:db8::1-x", "y")
        c = build_client_key("2001:db8:", ":1-x-y")
        assert len({a, b, c}) == 3
        assert len({a.fingerprint(), b.fingerprint(), c.fingerprint()}) == 3

    def test_fingerprint_is_short_and_stable(self) -> None:
        key = build_client_key("198.51.100.4", "Mozilla/5.0")
        assert key.fingerprint() == build_client_key("198.51.100.4", "Mozilla/5.0").fingerprint()
        assert len(key.fingerprint()) == 16
        assert "198.51.100.4" not in key.fingerprint()

    @pytest.mark.parametrize("address", [None, "", "   "])
    def test_missing_address_maps_to_unknown(self, address) -> None:
        assert build_client_key(address, "ua").address == UNKNOWN

    def test_str_is_human_readable(self) -> None:
        assert str(build_client_key("127.0.0.1", "test-agent")) == "127.0.0.1 test-agent"
