#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Per-field validators (observable, asyncio based)

- NetworkInputValidator: synchronous classification on every edit, then a
  debounced forward (hostname) or reverse (IP) lookup
- VINValidator: synchronous VIN validation with the same listener surface
- At most one lookup in flight per validator; superseded lookups are cancelled
  and stale results are discarded
- All state changes happen on the event loop that calls validate()
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Callable, List, Optional, Union

from models.classification_model import classify
from models.schemas import (
    Classification,
    ClassificationCategory,
    InputKind,
    ValidationState,
    ValidatorSettings,
    VINValidationState,
)
from models.vin_model import validate_vin
from pipeline.resolver import Resolver, SystemResolver, to_display_name
from utils.logger import bind_run_id, get_logger, log_metric

DEFAULT_DEBOUNCE = 0.5
DEFAULT_LOOKUP_TIMEOUT = 5.0
# Validator loggers are shared by name; each instance filters at its own log_level.
SHARED_LOG_LEVEL = "DEBUG"

_RESOLVABLE = (
    ClassificationCategory.CHECKING,
    ClassificationCategory.IPV4,
    ClassificationCategory.IPV6,
)

Listener = Callable[[object], None]


class _Observable:
    """Current state plus change notification for display collaborators."""

    def __init__(self, initial, logger) -> None:
        self._state = initial
        self._listeners: List[Listener] = []
        self.logger = logger

    @property
    def state(self):
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; the returned callable removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, state) -> None:
        self.logger.debug("State %r -> %r", self._state, state)
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                self.logger.exception("State listener %r failed", listener)


# ----------------------------------------------------------------------
# Network input
# ----------------------------------------------------------------------
class NetworkInputValidator(_Observable):
    def __init__(
        self,
        allowed_kinds: Union[InputKind, str, List[str]] = InputKind.ALL,
        resolver: Optional[Resolver] = None,
        debounce: float = DEFAULT_DEBOUNCE,
        lookup_timeout: Optional[float] = DEFAULT_LOOKUP_TIMEOUT,
        resolve: bool = True,
        log_level: str = "INFO",
    ):
        self.validator_id = uuid.uuid4().hex[:12]
        base_logger = get_logger("validator.network", SHARED_LOG_LEVEL, "validator.log")
        super().__init__(ValidationState.empty(), bind_run_id(base_logger, self.validator_id, log_level))

        self.allowed_kinds = InputKind.parse(allowed_kinds)
        self.resolver = resolver or SystemResolver()
        self.debounce = debounce
        self.lookup_timeout = lookup_timeout
        self.resolve = resolve

        self._last_checked_input = ""
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    @classmethod
    def from_settings(
        cls, settings: ValidatorSettings, resolver: Optional[Resolver] = None
    ) -> "NetworkInputValidator":
        return cls(
            allowed_kinds=settings.allowed_kinds,
            resolver=resolver,
            debounce=settings.debounce,
            lookup_timeout=settings.lookup_timeout,
            resolve=settings.resolve,
            log_level=settings.log_level,
        )

    @property
    def last_checked_input(self) -> str:
        return self._last_checked_input

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    # ---------------- Public API ----------------
    def validate(self, text: str) -> None:
        trimmed = (text or "").strip()
        if trimmed == self._last_checked_input:
            self.logger.debug("Skipping validation, input unchanged: '%s'", trimmed)
            return

        self._cancel_pending()
        self._generation += 1
        self._last_checked_input = trimmed

        classification = classify(trimmed, self.allowed_kinds)
        self.logger.debug("Classified '%s' as %s", trimmed, classification.category.value)
        self._publish(self._initial_state(trimmed, classification))

        if classification.category in _RESOLVABLE and self.resolve:
            self._schedule(trimmed, classification.category)

    def clear(self) -> None:
        self._cancel_pending()
        self._generation += 1
        self._last_checked_input = ""
        self._publish(ValidationState.empty())

    def close(self) -> None:
        self._cancel_pending()
        self._listeners.clear()

    async def wait_settled(self) -> ValidationState:
        """Wait until no lookup is scheduled, following superseding lookups."""
        while self.pending:
            await asyncio.wait({self._task})
        return self._state

    # ---------------- Internals ----------------
    @staticmethod
    def _initial_state(text: str, classification: Classification) -> ValidationState:
        category = classification.category
        if category is ClassificationCategory.EMPTY:
            return ValidationState.empty()
        if category is ClassificationCategory.IPV4:
            return ValidationState.ipv4(text)
        if category is ClassificationCategory.IPV6:
            return ValidationState.ipv6(text)
        if category is ClassificationCategory.MAC_ADDRESS:
            return ValidationState.mac_address(text, classification.mac_format)
        if category is ClassificationCategory.CHECKING:
            return ValidationState.checking(text)
        return ValidationState.invalid(text)

    def _cancel_pending(self) -> None:
        if self._task is not None and not self._task.done():
            self.logger.debug("Cancelling pending resolution (generation %d)", self._generation)
            self._task.cancel()
        self._task = None

    def _schedule(self, text: str, category: ClassificationCategory) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.logger.warning("No running event loop; resolution skipped for '%s'", text)
            return
        self._task = loop.create_task(self._resolve(text, category, self._generation))

    def _is_current(self, text: str, generation: int) -> bool:
        return generation == self._generation and text == self._last_checked_input

    async def _resolve(self, text: str, category: ClassificationCategory, generation: int) -> None:
        await asyncio.sleep(self.debounce)
        if not self._is_current(text, generation):
            return

        if category is ClassificationCategory.CHECKING:
            addresses = await self._forward(text)
            if not self._is_current(text, generation):
                self.logger.debug("Discarding stale forward result for '%s'", text)
                return
            state = ValidationState.hostname(text, addresses) if addresses else ValidationState.invalid(text)
        else:
            name = await self._reverse(text)
            if not self._is_current(text, generation):
                self.logger.debug("Discarding stale reverse result for '%s'", text)
                return
            if category is ClassificationCategory.IPV4:
                state = ValidationState.ipv4(text, name)
            else:
                state = ValidationState.ipv6(text, name)

        log_metric(self.logger, "resolution_completed", 1, category=state.category.value)
        self._publish(state)

    async def _forward(self, hostname: str) -> List[str]:
        try:
            addresses = await asyncio.wait_for(self.resolver.forward(hostname), self.lookup_timeout)
        except asyncio.TimeoutError:
            self.logger.warning("Forward lookup timed out for '%s' after %ss", hostname, self.lookup_timeout)
            return []
        except Exception as e:
            self.logger.info("Forward lookup failed for '%s': %s", hostname, e)
            return []
        self.logger.debug("Forward lookup '%s' -> %s", hostname, addresses)
        return list(addresses or [])

    async def _reverse(self, address: str) -> Optional[str]:
        try:
            name = await asyncio.wait_for(self.resolver.reverse(address), self.lookup_timeout)
        except asyncio.TimeoutError:
            self.logger.debug("Reverse lookup timed out for '%s'", address)
            return None
        except Exception as e:
            self.logger.debug("Reverse lookup failed for '%s': %s", address, e)
            return None
        if not name or name == address:
            return None
        return to_display_name(name)


# ----------------------------------------------------------------------
# VIN input
# ----------------------------------------------------------------------
class VINValidator(_Observable):
    def __init__(self, log_level: str = "INFO"):
        self.validator_id = uuid.uuid4().hex[:12]
        base_logger = get_logger("validator.vin", SHARED_LOG_LEVEL, "validator.log")
        super().__init__(VINValidationState.empty(), bind_run_id(base_logger, self.validator_id, log_level))
        self._last_checked_input = ""

    @property
    def last_checked_input(self) -> str:
        return self._last_checked_input

    def validate(self, text: str) -> None:
        normalized = (text or "").strip().upper()
        if normalized == self._last_checked_input:
            return
        self._last_checked_input = normalized
        self._publish(validate_vin(normalized))

    def clear(self) -> None:
        self._last_checked_input = ""
        self._publish(VINValidationState.empty())

    def close(self) -> None:
        self._listeners.clear()
