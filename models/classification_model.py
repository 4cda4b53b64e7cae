#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Classification Models (pure, synchronous)

Responsibilities:
- Recognise ipv4 (strict dotted quad), ipv6 (optional %zone), mac address (4 notations)
- Pre-filter potential hostnames with the LDH rule (syntax only, no DNS)
- Classify raw field input into a coarse category honouring the allowed kinds
- NO resolution here. DNS happens later in pipeline.validator.
"""

from __future__ import annotations

import ipaddress
import re
from typing import Optional

from models.schemas import Classification, ClassificationCategory, InputKind, MACFormat


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------
_HEX_GROUP_2_RE = re.compile(r"[0-9A-F]{2}")
_HEX_GROUP_4_RE = re.compile(r"[0-9A-F]{4}")
_COMPACT_MAC_RE = re.compile(r"[0-9A-F]{12}")
_HOSTNAME_CHARS_RE = re.compile(r"[A-Za-z0-9._-]+")
_LABEL_CHARS_RE = re.compile(r"[A-Za-z0-9-]+")

MAX_HOSTNAME_LENGTH = 253
MAX_LABEL_LENGTH = 63

# (delimiter, group count, group pattern, format), tried in order
_MAC_NOTATIONS = (
    (":", 6, _HEX_GROUP_2_RE, MACFormat.IEEE802),
    ("-", 6, _HEX_GROUP_2_RE, MACFormat.WINDOWS),
    (".", 3, _HEX_GROUP_4_RE, MACFormat.CISCO),
)


def _is_ascii_digits(text: str) -> bool:
    return text.isascii() and text.isdigit()


# ----------------------------------------------------------------------
# Syntactic classifiers
# ----------------------------------------------------------------------
def is_ipv4(text: str) -> bool:
    """
    Strict dotted-quad check.

    Single numbers ("26510") and shortened forms ("1.1.1") are rejected even
    though inet_aton would accept them.
    """
    if not text or ":" in text or "." not in text:
        return False

    parts = text.split(".")
    if len(parts) != 4:
        return False

    for part in parts:
        if not part or len(part) > 3:
            return False
        if not _is_ascii_digits(part):
            return False
        if len(part) > 1 and part[0] == "0":
            return False
        if int(part) > 255:
            return False
    return True


def is_ipv6(text: str) -> bool:
    """Textual IPv6, compressed forms and IPv4 tails included. A '%zone' suffix is ignored."""
    if not text:
        return False
    core = text.split("%", 1)[0]
    if not core:
        return False
    try:
        ipaddress.IPv6Address(core)
        return True
    except ValueError:
        return False


def is_mac_address(text: str) -> Optional[MACFormat]:
    """Return the matched notation, or None."""
    if not text:
        return None
    upper = text.upper()

    for delimiter, count, group_re, mac_format in _MAC_NOTATIONS:
        if delimiter not in upper:
            continue
        groups = upper.split(delimiter)
        if len(groups) == count and all(group_re.fullmatch(g) for g in groups):
            return mac_format

    if _COMPACT_MAC_RE.fullmatch(upper):
        return MACFormat.COMPACT
    return None


def could_be_hostname(text: str) -> bool:
    """
    LDH pre-filter run before any DNS lookup. Passing it does not mean the
    name resolves.
    """
    if not text:
        return False
    if is_ipv4(text) or is_ipv6(text) or is_mac_address(text) is not None:
        return False
    if len(text) == 1:
        return False
    # resolvers may read a bare number as a 32-bit address
    if _is_ascii_digits(text):
        return False
    if len(text) > MAX_HOSTNAME_LENGTH:
        return False
    if not _HOSTNAME_CHARS_RE.fullmatch(text):
        return False

    labels = text.split(".")
    if any(not label for label in labels):
        return False

    for label in labels:
        if len(label) > MAX_LABEL_LENGTH:
            return False
        if label.startswith("-") or label.endswith("-"):
            return False
        if not _LABEL_CHARS_RE.fullmatch(label):
            return False
    return True


# ----------------------------------------------------------------------
# Classification
# ----------------------------------------------------------------------
def classify(raw: str, allowed_kinds: InputKind = InputKind.ALL) -> Classification:
    """
    Map raw field input to a coarse category.

    IP and MAC checks run before the hostname check, so "1.2.3.4" can never
    end up as a hostname candidate.
    """
    text = (raw or "").strip()
    if not text:
        return Classification(ClassificationCategory.EMPTY)

    if InputKind.IPV4 in allowed_kinds and is_ipv4(text):
        return Classification(ClassificationCategory.IPV4)

    if InputKind.IPV6 in allowed_kinds and is_ipv6(text):
        return Classification(ClassificationCategory.IPV6)

    if InputKind.MAC_ADDRESS in allowed_kinds:
        mac_format = is_mac_address(text)
        if mac_format is not None:
            return Classification(ClassificationCategory.MAC_ADDRESS, mac_format)

    if InputKind.HOSTNAME in allowed_kinds and could_be_hostname(text):
        return Classification(ClassificationCategory.CHECKING)

    return Classification(ClassificationCategory.INVALID)
