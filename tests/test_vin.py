import pytest

from models.schemas import VINStatus
from models.vin_model import (
    expected_check_digit,
    is_valid_check_digit,
    is_valid_vin_character,
    parse_vin_components,
    sanitize_vin_input,
    validate_vin,
)

HONDA_ACCORD = "1HGCM82633A004352"


def test_valid_vin_decodes_components():
    state = validate_vin(HONDA_ACCORD)

    assert state.status is VINStatus.VALID
    assert state.is_valid
    assert state.input_text == HONDA_ACCORD
    assert state.components.wmi == "1HG"
    assert state.components.vds == "CM8263"
    assert state.components.vis == "3A004352"
    assert state.components.model_year == "2003"


def test_valid_vin_is_trimmed_and_uppercased():
    state = validate_vin("  1hgcm82633a004352 \n")
    assert state.status is VINStatus.VALID
    assert state.input_text == HONDA_ACCORD


def test_check_digit_x():
    state = validate_vin("1M8GDM9AXKP042788")
    assert state.status is VINStatus.VALID
    assert expected_check_digit("1M8GDM9AXKP042788") == "X"


def test_model_year_uses_single_cycle():
    # "K" is 1989 for this vehicle; the table only knows 2010-2029 for letters
    state = validate_vin("1M8GDM9AXKP042788")
    assert state.components.model_year == "2019"


def test_unmapped_model_year_code_is_none():
    state = validate_vin("11111111301111111")
    assert state.status is VINStatus.VALID
    assert state.components.model_year is None


def test_all_ones_vin():
    state = validate_vin("11111111111111111")
    assert state.status is VINStatus.VALID
    assert state.components.model_year == "2001"


def test_mutated_check_digit_is_rejected():
    mutated = HONDA_ACCORD[:8] + "4" + HONDA_ACCORD[9:]
    state = validate_vin(mutated)
    assert state.status is VINStatus.INVALID_CHECK_DIGIT
    assert state.expected_check_digit == "3"
    assert state.suggested_vin == HONDA_ACCORD
    assert not is_valid_check_digit(mutated)


def test_invalid_check_digit_suggests_correction():
    state = validate_vin("1HGCM82633A123456")
    assert state.status is VINStatus.INVALID_CHECK_DIGIT
    assert state.expected_check_digit == "7"
    assert state.suggested_vin == "1HGCM82673A123456"
    assert validate_vin(state.suggested_vin).status is VINStatus.VALID


def test_letter_o_is_invalid_character():
    value = HONDA_ACCORD[:16] + "O"
    assert len(value) == 17
    assert validate_vin(value).status is VINStatus.INVALID_CHARACTERS


@pytest.mark.parametrize("value", ["1HGI", "1hg-cm", "1HGQ", "VIN 123"])
def test_invalid_characters_before_full_length(value):
    assert validate_vin(value).status is VINStatus.INVALID_CHARACTERS


def test_incomplete_reports_remaining():
    state = validate_vin(HONDA_ACCORD[:16])
    assert state.status is VINStatus.INCOMPLETE
    assert state.remaining == 1

    assert validate_vin("1HG").remaining == 14


def test_too_long_checked_before_characters():
    assert validate_vin(HONDA_ACCORD + "1").status is VINStatus.TOO_LONG
    assert validate_vin("I" * 18).status is VINStatus.TOO_LONG


@pytest.mark.parametrize("value", ["", "   ", None])
def test_empty(value):
    state = validate_vin(value)
    assert state.status is VINStatus.EMPTY
    assert state.input_text == ""


def test_parse_components_matches_slices():
    for vin in (HONDA_ACCORD, "1M8GDM9AXKP042788", "11111111111111111"):
        state = validate_vin(vin)
        components = parse_vin_components(state.input_text)
        assert components.wmi == vin[0:3]
        assert components.vds == vin[3:9]
        assert components.vis == vin[9:17]
        assert components == state.components


def test_parse_components_wrong_length():
    components = parse_vin_components("1HG")
    assert (components.wmi, components.vds, components.vis, components.model_year) == ("", "", "", None)


def test_expected_check_digit_requires_full_vin():
    assert expected_check_digit("1HG") is None
    assert expected_check_digit("1HGCM82633A00435O") is None


def test_sanitize_vin_input():
    assert sanitize_vin_input("1hg-cm8 2633a0043521234") == HONDA_ACCORD
    assert sanitize_vin_input("ioq123") == "123"
    assert sanitize_vin_input("") == ""


@pytest.mark.parametrize("char,expected", [("a", True), ("Z", True), ("7", True), ("i", False), ("O", False), ("q", False), ("-", False), ("", False), ("ab", False)])
def test_is_valid_vin_character(char, expected):
    assert is_valid_vin_character(char) is expected


def test_status_titles():
    assert VINStatus.VALID.title == "Valid VIN"
    assert VINStatus.INVALID_CHECK_DIGIT.title == "Invalid Check Digit"
