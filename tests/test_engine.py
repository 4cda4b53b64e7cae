import json
import logging

import pytest

from fakes import FakeResolver
from models.schemas import InputKind, ValidatorSettings
from pipeline.engine import EngineConfig, run_pipeline

logger = logging.getLogger("tests.engine")


def test_run_pipeline_network_writes_output(tmp_path):
    resolver = FakeResolver(
        forward={"example.com": ["93.184.216.34"]},
        reverse={"192.0.2.10": "web.example"},
    )
    output_path = tmp_path / "out" / "results.json"
    settings = ValidatorSettings(debounce=0, log_level="DEBUG")

    results = run_pipeline(
        values=["192.0.2.10", "example.com", "nowhere.invalid", "AA:BB:CC:DD:EE:FF", "26510"],
        output=str(output_path),
        settings=settings,
        resolver=resolver,
    )

    assert output_path.exists()
    data = json.loads(output_path.read_text(encoding="utf-8"))
    assert data == results
    categories = [entry["state"]["category"] for entry in data]
    assert categories == ["ipv4", "hostname", "invalid", "mac_address", "invalid"]
    assert data[0]["state"]["resolved_hostname"] == "web.example"
    assert data[1]["state"]["resolved_ips"] == ["93.184.216.34"]
    assert data[3]["state"]["mac_format"] == "IEEE 802"


def test_run_pipeline_vin_mode():
    results = run_pipeline(values=["1HGCM82633A004352", "1HGCM"], mode="vin")

    assert results[0]["state"]["status"] == "valid"
    assert results[0]["state"]["components"]["model_year"] == "2003"
    assert results[1]["state"]["status"] == "incomplete"
    assert results[1]["state"]["remaining"] == 12


def test_run_pipeline_rejects_unknown_mode():
    with pytest.raises(ValueError):
        run_pipeline(values=["x"], mode="url")


def test_load_settings_from_yaml_with_overrides(tmp_path):
    cfg = tmp_path / "validator.yaml"
    cfg.write_text(
        "validator:\n"
        "  allowed_kinds: [ipv4, ipv6]\n"
        "  debounce: 0.25\n"
        "  lookup_timeout: 2\n"
    )

    settings = EngineConfig.load_settings(str(cfg), logger, debounce=0.75, resolve=None)

    assert settings.allowed_kinds == InputKind.IP_ADDRESSES
    assert settings.debounce == 0.75
    assert settings.lookup_timeout == 2
    assert settings.resolve is True


def test_load_settings_without_file_uses_defaults():
    settings = EngineConfig.load_settings(None, logger, log_level="debug")
    assert settings.allowed_kinds == InputKind.ALL
    assert settings.debounce == 0.5
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "data",
    [
        {"allowed_kinds": ["ipv5"]},
        {"allowed_kinds": 3},
        {"allowed_kinds": True},
        {"validator": {"allowed_kinds": {"ipv4": 1}}},
        {"debounce": -1},
        {"validator": ["not", "a", "mapping"]},
    ],
)
def test_build_settings_rejects_bad_values(data):
    with pytest.raises(ValueError):
        EngineConfig.build_settings(data, logger)


def test_load_inputs_skips_comments_and_blanks(tmp_path):
    data_file = tmp_path / "inputs.txt"
    data_file.write_text("\ufeff# header\n192.0.2.1\n\nexample.com # office router\n  ::1  \n", encoding="utf-8")

    assert EngineConfig.load_inputs(str(data_file), logger) == ["192.0.2.1", "example.com", "::1"]
