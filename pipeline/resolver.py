#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DNS resolver boundary.

- `Resolver` is the only OS-facing collaborator of the validators; tests inject fakes
- `SystemResolver` runs getaddrinfo/getnameinfo through the event loop's executor
- Lookup failures surface as `ResolutionError`
"""

from __future__ import annotations

import abc
import asyncio
import socket
from typing import List, Optional

import idna


class ResolutionError(Exception):
    """A forward or reverse lookup failed."""


class Resolver(abc.ABC):
    @abc.abstractmethod
    async def forward(self, hostname: str) -> List[str]:
        """Return IPv4 and IPv6 addresses for hostname (may be empty)."""

    @abc.abstractmethod
    async def reverse(self, address: str) -> Optional[str]:
        """Return the PTR name for address, or None."""


class SystemResolver(Resolver):
    """Uses the platform resolver (hosts file, DNS, mDNS, ...) off the event loop thread."""

    async def forward(self, hostname: str) -> List[str]:
        loop = asyncio.get_running_loop()
        try:
            infos = await loop.getaddrinfo(
                hostname, None, family=socket.AF_UNSPEC, type=socket.SOCK_STREAM
            )
        except (OSError, UnicodeError) as e:
            raise ResolutionError(f"Forward lookup failed for {hostname}: {e}") from e

        addresses: List[str] = []
        for family, _type, _proto, _canon, sockaddr in infos:
            if family not in (socket.AF_INET, socket.AF_INET6):
                continue
            address = sockaddr[0]
            if address not in addresses:
                addresses.append(address)
        return addresses

    async def reverse(self, address: str) -> Optional[str]:
        loop = asyncio.get_running_loop()
        try:
            host, _service = await loop.getnameinfo((address, 0), socket.NI_NAMEREQD)
        except OSError as e:
            raise ResolutionError(f"Reverse lookup failed for {address}: {e}") from e
        return host or None


def to_display_name(name: str) -> str:
    """
    Decode punycode labels ("xn--...") for display. Names that are not valid
    IDNA are returned unchanged.
    """
    stripped = name.rstrip(".")
    if "xn--" not in stripped.lower():
        return stripped
    try:
        return idna.decode(stripped)
    except idna.IDNAError:
        return stripped
