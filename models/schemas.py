"""
Shared Pydantic schemas used across the input-validation engine.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, Flag
from typing import Any, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InputKind(Flag):
    HOSTNAME = 1
    IPV4 = 2
    IPV6 = 4
    MAC_ADDRESS = 8

    ALL = HOSTNAME | IPV4 | IPV6 | MAC_ADDRESS
    IP_ADDRESSES = IPV4 | IPV6
    IP_AND_HOSTNAME = HOSTNAME | IPV4 | IPV6

    @classmethod
    def parse(cls, value: Union[str, Iterable[str], "InputKind", None]) -> "InputKind":
        """
        Build a kind set from configuration: 'all', a single name, a
        comma-separated string or a list of names (case-insensitive).
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.ALL
        if isinstance(value, str):
            names = value.split(",")
        elif isinstance(value, (list, tuple, set, frozenset)):
            names = list(value)
        else:
            raise ValueError(
                f"allowed_kinds must be 'all', a kind name or a list of names, got {value!r}"
            )

        result = cls(0)
        for raw in names:
            if not isinstance(raw, str):
                raise ValueError(f"Input kind entries must be strings, got {raw!r}")
            name = raw.strip().upper().replace("-", "_")
            if not name:
                continue
            if name == "MAC":
                name = "MAC_ADDRESS"
            try:
                result |= cls[name]
            except KeyError:
                valid = ", ".join(m.name.lower() for m in cls.__members__.values())
                raise ValueError(f"Unknown input kind '{raw}'. Expected one of: {valid}") from None
        if not result:
            raise ValueError("At least one input kind must be allowed")
        return result


class MACFormat(str, Enum):
    IEEE802 = "IEEE 802"
    WINDOWS = "Windows"
    CISCO = "Cisco"
    COMPACT = "Compact"


class ClassificationCategory(str, Enum):
    EMPTY = "empty"
    IPV4 = "ipv4"
    IPV6 = "ipv6"
    MAC_ADDRESS = "mac_address"
    HOSTNAME = "hostname"
    CHECKING = "checking"
    INVALID = "invalid"

    @property
    def title(self) -> str:
        return _CATEGORY_TITLES[self]


_CATEGORY_TITLES = {
    ClassificationCategory.EMPTY: "Empty",
    ClassificationCategory.IPV4: "IPv4 address",
    ClassificationCategory.IPV6: "IPv6 address",
    ClassificationCategory.MAC_ADDRESS: "MAC address",
    ClassificationCategory.HOSTNAME: "Hostname",
    ClassificationCategory.CHECKING: "Checking…",
    ClassificationCategory.INVALID: "Invalid",
}


@dataclass(frozen=True)
class Classification:
    """Outcome of the synchronous classification step."""

    category: ClassificationCategory
    mac_format: Optional[MACFormat] = None


# ----------------------------------------------------------------------
# Network input state
# ----------------------------------------------------------------------
class ValidationState(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: ClassificationCategory = Field(..., description="Current category of the field")
    input_text: str = Field("", description="Trimmed input this state was derived from")
    resolved_hostname: Optional[str] = Field(
        None, description="Reverse DNS name (IPv4/IPv6 only)"
    )
    resolved_ips: List[str] = Field(
        default_factory=list, description="Forward DNS addresses (hostname only)"
    )
    mac_format: Optional[MACFormat] = Field(None, description="Matched MAC notation")

    @classmethod
    def empty(cls) -> "ValidationState":
        return cls(category=ClassificationCategory.EMPTY)

    @classmethod
    def ipv4(cls, text: str, hostname: Optional[str] = None) -> "ValidationState":
        return cls(category=ClassificationCategory.IPV4, input_text=text, resolved_hostname=hostname)

    @classmethod
    def ipv6(cls, text: str, hostname: Optional[str] = None) -> "ValidationState":
        return cls(category=ClassificationCategory.IPV6, input_text=text, resolved_hostname=hostname)

    @classmethod
    def mac_address(cls, text: str, mac_format: MACFormat) -> "ValidationState":
        return cls(category=ClassificationCategory.MAC_ADDRESS, input_text=text, mac_format=mac_format)

    @classmethod
    def hostname(cls, text: str, resolved_ips: Iterable[str]) -> "ValidationState":
        return cls(category=ClassificationCategory.HOSTNAME, input_text=text, resolved_ips=list(resolved_ips))

    @classmethod
    def checking(cls, text: str) -> "ValidationState":
        return cls(category=ClassificationCategory.CHECKING, input_text=text)

    @classmethod
    def invalid(cls, text: str) -> "ValidationState":
        return cls(category=ClassificationCategory.INVALID, input_text=text)

    @property
    def is_valid(self) -> bool:
        return self.category in (
            ClassificationCategory.IPV4,
            ClassificationCategory.IPV6,
            ClassificationCategory.MAC_ADDRESS,
            ClassificationCategory.HOSTNAME,
        )

    @property
    def is_pending(self) -> bool:
        return self.category is ClassificationCategory.CHECKING


# ----------------------------------------------------------------------
# VIN state
# ----------------------------------------------------------------------
class VINStatus(str, Enum):
    EMPTY = "empty"
    INCOMPLETE = "incomplete"
    INVALID_CHARACTERS = "invalid_characters"
    TOO_LONG = "too_long"
    INVALID_CHECK_DIGIT = "invalid_check_digit"
    VALID = "valid"

    @property
    def title(self) -> str:
        return _VIN_TITLES[self]


_VIN_TITLES = {
    VINStatus.EMPTY: "Empty",
    VINStatus.INCOMPLETE: "Incomplete VIN",
    VINStatus.INVALID_CHARACTERS: "Invalid Characters",
    VINStatus.TOO_LONG: "Too Long",
    VINStatus.INVALID_CHECK_DIGIT: "Invalid Check Digit",
    VINStatus.VALID: "Valid VIN",
}


class VINComponents(BaseModel):
    model_config = ConfigDict(frozen=True)

    wmi: str = Field(..., description="World Manufacturer Identifier (positions 1-3)")
    vds: str = Field(..., description="Vehicle Descriptor Section (positions 4-9)")
    vis: str = Field(..., description="Vehicle Identifier Section (positions 10-17)")
    model_year: Optional[str] = Field(
        None, description="Year decoded from position 10 (single 30-year cycle)"
    )


class VINValidationState(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: VINStatus
    input_text: str = ""
    remaining: Optional[int] = Field(None, description="Characters missing (incomplete only)")
    components: Optional[VINComponents] = None
    expected_check_digit: Optional[str] = Field(
        None, description="Check digit the other 16 characters imply (invalid_check_digit only)"
    )
    suggested_vin: Optional[str] = Field(
        None, description="Input with the expected check digit substituted"
    )

    @classmethod
    def empty(cls) -> "VINValidationState":
        return cls(status=VINStatus.EMPTY)

    @classmethod
    def incomplete(cls, text: str, remaining: int) -> "VINValidationState":
        return cls(status=VINStatus.INCOMPLETE, input_text=text, remaining=remaining)

    @classmethod
    def invalid_characters(cls, text: str) -> "VINValidationState":
        return cls(status=VINStatus.INVALID_CHARACTERS, input_text=text)

    @classmethod
    def too_long(cls, text: str) -> "VINValidationState":
        return cls(status=VINStatus.TOO_LONG, input_text=text)

    @classmethod
    def invalid_check_digit(
        cls, text: str, expected: Optional[str] = None, suggested: Optional[str] = None
    ) -> "VINValidationState":
        return cls(
            status=VINStatus.INVALID_CHECK_DIGIT,
            input_text=text,
            expected_check_digit=expected,
            suggested_vin=suggested,
        )

    @classmethod
    def valid(cls, text: str, components: VINComponents) -> "VINValidationState":
        return cls(status=VINStatus.VALID, input_text=text, components=components)

    @property
    def is_valid(self) -> bool:
        return self.status is VINStatus.VALID


# ----------------------------------------------------------------------
# Settings
# ----------------------------------------------------------------------
class ValidatorSettings(BaseModel):
    allowed_kinds: InputKind = Field(InputKind.ALL, description="Kinds the field accepts")
    debounce: float = Field(0.5, ge=0, description="Quiet period (s) before a lookup")
    lookup_timeout: Optional[float] = Field(5.0, gt=0, description="Per-lookup timeout (s)")
    resolve: bool = Field(True, description="Run forward/reverse DNS at all")
    log_level: str = Field("INFO", description="Logger level name")

    @field_validator("allowed_kinds", mode="before")
    @classmethod
    def _parse_kinds(cls, value: Any) -> InputKind:
        return InputKind.parse(value)

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()
