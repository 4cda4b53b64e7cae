# engine.py
from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from models.schemas import ValidationState, ValidatorSettings, VINValidationState
from pipeline.resolver import Resolver
from pipeline.validator import NetworkInputValidator, VINValidator
from utils.config_loader import load_config
from utils.logger import get_logger, log_metric, log_stage

SUPPORTED_MODES = ("network", "vin")


# ----------------------------------------------------------------------
# Config Manager
# ----------------------------------------------------------------------
class EngineConfig:
    @staticmethod
    def build_settings(data: Optional[Dict[str, Any]], logger, **overrides: Any) -> ValidatorSettings:
        """
        Merge a config mapping (top level or under 'validator') with explicit
        overrides; None overrides are ignored.
        """
        data = dict(data or {})
        section = data.get("validator", data)
        if not isinstance(section, dict):
            raise ValueError("'validator' section must be a mapping")
        merged = dict(section)
        merged.update({k: v for k, v in overrides.items() if v is not None})
        try:
            settings = ValidatorSettings(**merged)
        except ValidationError as e:
            logger.error("Invalid validator settings: %s", e)
            raise ValueError(f"Invalid validator settings: {e}") from e
        logger.info(
            "Validator settings | kinds=%s debounce=%.3fs timeout=%s resolve=%s",
            settings.allowed_kinds, settings.debounce, settings.lookup_timeout, settings.resolve,
        )
        return settings

    @staticmethod
    def load_settings(path: Optional[str], logger, **overrides: Any) -> ValidatorSettings:
        data = load_config(path, logger) if path else {}
        return EngineConfig.build_settings(data, logger, **overrides)

    @staticmethod
    def load_inputs(path: str, logger) -> List[str]:
        """
        Read one value per line. Blank lines, full-line '#' comments and
        inline ' #' comments are dropped.
        """
        values: List[str] = []
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                value = line.lstrip("\ufeff").strip()
                idx = value.find(" #")
                if idx != -1:
                    value = value[:idx].rstrip()
                if not value or value.startswith("#"):
                    continue
                values.append(value)
        logger.info("Loaded %d inputs from %s", len(values), path)
        return values


# ----------------------------------------------------------------------
# Orchestrator
# ----------------------------------------------------------------------
class Orchestrator:
    """
    Runs one validator per input value and waits for each to settle:
      classify -> (debounced lookup) -> final state
    """

    def __init__(
        self,
        settings: Optional[ValidatorSettings] = None,
        resolver: Optional[Resolver] = None,
        concurrency: int = 16,
    ):
        self.settings = settings or ValidatorSettings()
        self.resolver = resolver
        self.concurrency = max(1, concurrency)
        self.logger = get_logger("engine.orchestrator", self.settings.log_level, "engine.log")

    async def _settle(self, value: str, semaphore: asyncio.Semaphore) -> ValidationState:
        async with semaphore:
            validator = NetworkInputValidator.from_settings(self.settings, resolver=self.resolver)
            try:
                validator.validate(value)
                return await validator.wait_settled()
            finally:
                validator.close()

    async def run(self, values: Iterable[str]) -> List[ValidationState]:
        values = list(values)
        self.logger.info("Validating %d network inputs", len(values))
        semaphore = asyncio.Semaphore(self.concurrency)
        with log_stage(self.logger, "network_batch"):
            results = await asyncio.gather(*(self._settle(v, semaphore) for v in values))
        self._report(results)
        return list(results)

    def run_vin(self, values: Iterable[str]) -> List[VINValidationState]:
        values = list(values)
        self.logger.info("Validating %d VIN inputs", len(values))
        results: List[VINValidationState] = []
        with log_stage(self.logger, "vin_batch"):
            for value in values:
                validator = VINValidator(log_level=self.settings.log_level)
                validator.validate(value)
                results.append(validator.state)
        self._report(results)
        return results

    def _report(self, results: List[Union[ValidationState, VINValidationState]]) -> None:
        valid = sum(1 for r in results if r.is_valid)
        log_metric(self.logger, "inputs_total", len(results), stage="validate")
        log_metric(self.logger, "inputs_valid", valid, stage="validate")
        log_metric(self.logger, "inputs_invalid", len(results) - valid, stage="validate")


# ----------------------------------------------------------------------
# Runner
# ----------------------------------------------------------------------
def run_pipeline(
    values: Iterable[str],
    output: Optional[str] = None,
    settings: Optional[ValidatorSettings] = None,
    mode: str = "network",
    resolver: Optional[Resolver] = None,
) -> List[Dict[str, Any]]:
    """
    Convenience wrapper for the CLI entrypoint.
    Returns [{"input": ..., "state": {...}}] and writes it as JSON when output is set.
    """
    if mode not in SUPPORTED_MODES:
        raise ValueError(f"Unsupported mode '{mode}'. Expected one of {SUPPORTED_MODES}.")

    values = list(values)
    orchestrator = Orchestrator(settings=settings, resolver=resolver)
    if mode == "vin":
        states = orchestrator.run_vin(values)
    else:
        states = asyncio.run(orchestrator.run(values))

    payload = [
        {"input": value, "state": state.model_dump(mode="json")}
        for value, state in zip(values, states)
    ]

    if output:
        out_path = Path(output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        with out_path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        orchestrator.logger.info("Results written to %s", out_path)

    return payload
