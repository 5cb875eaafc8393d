"""Client identification for throttling.

A client is bucketed by network origin plus the (truncated) User-Agent
string. The key is a composite value rather than a joined string, so an
address containing colons (IPv6) or a crafted agent containing any
delimiter can never merge two distinct clients.

Requests from the same address with the same agent share a bucket on
purpose. When neither a forwarded address nor a peer address is known,
all such requests share the ``"unknown"`` bucket: throttling gets coarser
behind proxies that strip headers, but never fails.
"""

from __future__ import annotations

import hashlib
from typing import NamedTuple

from starlette.requests import Request

UNKNOWN = "unknown"
USER_AGENT_MAX_CHARS = 50
FORWARDED_FOR_HEADER = "x-forwarded-for"


class ClientKey(NamedTuple):
    """Identity used to bucket requests."""

    address: str
    agent: str

    def __str__(self) -> str:
        return f"{self.address} {self.agent}"

    def fingerprint(self) -> str:
        """Short, log-safe digest of the key."""
        hasher = hashlib.sha256()
        for part in self:
            encoded = part.encode("utf-8")
            hasher.update(len(encoded).to_bytes(4, "big"))
            hasher.update(encoded)
        return hasher.hexdigest()[:16]


def build_client_key(address: str | None, user_agent: str | None) -> ClientKey:
    """Build a key from already-resolved parts.

    Used by the request path and by operators naming a key out-of-band.
    """
    resolved_address = (address or "").strip() or UNKNOWN
    agent = UNKNOWN if user_agent is None else user_agent[:USER_AGENT_MAX_CHARS]
    return ClientKey(resolved_address, agent)


def _first_forwarded_address(header_value: str | None) -> str | None:
    if not header_value:
        return None
    first = header_value.split(",", 1)[0].strip()
    return first or None


def identify_client(request: Request, *, trust_forwarded_for: bool = True) -> ClientKey:
    """Derive the throttling key for a request.

    Args:
        request: Incoming request.
        trust_forwarded_for: Prefer the first ``X-Forwarded-For`` entry over
            the socket peer (the limiter normally sits behind a proxy).

    Returns:
        ClientKey for the request. Never raises.
    """
    address = None
    if trust_forwarded_for:
        address = _first_forwarded_address(request.headers.get(FORWARDED_FOR_HEADER))
    if address is None and request.client is not None:
        address = request.client.host

    return build_client_key(address, request.headers.get("user-agent"))
