#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
VIN Models (ISO 3779, pure, synchronous)

Responsibilities:
- Keystroke filtering for a VIN field (uppercase, drop I/O/Q and symbols, cap at 17)
- Length / character / check-digit validation
- Split a valid VIN into WMI / VDS / VIS and decode the model year
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Optional, Tuple

from models.schemas import VINComponents, VINValidationState

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# Constants
# ----------------------------------------------------------------------
VIN_LENGTH = 17
CHECK_DIGIT_INDEX = 8
MODEL_YEAR_INDEX = 9

# I, O and Q are excluded to avoid confusion with 1 and 0
VALID_VIN_CHARS: FrozenSet[str] = frozenset("ABCDEFGHJKLMNPRSTUVWXYZ0123456789")

WEIGHTS: Tuple[int, ...] = (8, 7, 6, 5, 4, 3, 2, 10, 0, 9, 8, 7, 6, 5, 4, 3, 2)

TRANSLITERATION: Dict[str, int] = {
    "A": 1, "B": 2, "C": 3, "D": 4, "E": 5, "F": 6, "G": 7, "H": 8,
    "J": 1, "K": 2, "L": 3, "M": 4, "N": 5, "P": 7, "R": 9,
    "S": 2, "T": 3, "U": 4, "V": 5, "W": 6, "X": 7, "Y": 8, "Z": 9,
    "0": 0, "1": 1, "2": 2, "3": 3, "4": 4, "5": 5, "6": 6, "7": 7, "8": 8, "9": 9,
}

# Position-10 codes repeat every 30 years ("A" is 1980 as well as 2010).
# Only the 2000-2029 cycle is mapped; no other VIN field is used to pick a cycle.
MODEL_YEAR_CODES: Dict[str, str] = {
    "A": "2010", "B": "2011", "C": "2012", "D": "2013", "E": "2014", "F": "2015",
    "G": "2016", "H": "2017", "J": "2018", "K": "2019", "L": "2020", "M": "2021",
    "N": "2022", "P": "2023", "R": "2024", "S": "2025", "T": "2026", "V": "2027",
    "W": "2028", "X": "2029", "Y": "2000", "1": "2001", "2": "2002", "3": "2003",
    "4": "2004", "5": "2005", "6": "2006", "7": "2007", "8": "2008", "9": "2009",
}


# ----------------------------------------------------------------------
# Character helpers
# ----------------------------------------------------------------------
def is_valid_vin_character(char: str) -> bool:
    return len(char) == 1 and char.upper() in VALID_VIN_CHARS


def sanitize_vin_input(text: str) -> str:
    """Uppercase, drop characters a VIN can never contain, cap at 17."""
    filtered = "".join(ch for ch in (text or "").upper() if ch in VALID_VIN_CHARS)
    return filtered[:VIN_LENGTH]


# ----------------------------------------------------------------------
# Check digit
# ----------------------------------------------------------------------
def expected_check_digit(vin: str) -> Optional[str]:
    """
    Check digit implied by a 17-character VIN, or None if the VIN has the
    wrong length or an untransliterable character. Position 9 carries weight
    0, so the current check digit does not influence the result.
    """
    if len(vin) != VIN_LENGTH:
        return None
    total = 0
    for char, weight in zip(vin, WEIGHTS):
        value = TRANSLITERATION.get(char)
        if value is None:
            return None
        total += value * weight
    remainder = total % 11
    return "X" if remainder == 10 else str(remainder)


def is_valid_check_digit(vin: str) -> bool:
    expected = expected_check_digit(vin)
    if expected is None:
        return False
    actual = vin[CHECK_DIGIT_INDEX]
    if actual != expected:
        logger.debug(
            "VIN check digit mismatch | vin=%s | expected=%s | actual=%s | suggested=%s",
            vin, expected, actual, _with_check_digit(vin, expected),
        )
        return False
    return True


def _with_check_digit(vin: str, digit: str) -> str:
    return vin[:CHECK_DIGIT_INDEX] + digit + vin[CHECK_DIGIT_INDEX + 1:]


# ----------------------------------------------------------------------
# Decoding
# ----------------------------------------------------------------------
def parse_vin_components(vin: str) -> VINComponents:
    if len(vin) != VIN_LENGTH:
        return VINComponents(wmi="", vds="", vis="", model_year=None)
    return VINComponents(
        wmi=vin[:3],
        vds=vin[3:9],
        vis=vin[9:],
        model_year=MODEL_YEAR_CODES.get(vin[MODEL_YEAR_INDEX]),
    )


def validate_vin(raw: str) -> VINValidationState:
    text = (raw or "").strip().upper()
    if not text:
        return VINValidationState.empty()

    if len(text) > VIN_LENGTH:
        return VINValidationState.too_long(text)

    if any(ch not in VALID_VIN_CHARS for ch in text):
        return VINValidationState.invalid_characters(text)

    if len(text) < VIN_LENGTH:
        return VINValidationState.incomplete(text, VIN_LENGTH - len(text))

    if is_valid_check_digit(text):
        return VINValidationState.valid(text, parse_vin_components(text))

    expected = expected_check_digit(text)
    return VINValidationState.invalid_check_digit(
        text, expected=expected, suggested=_with_check_digit(text, expected)
    )
