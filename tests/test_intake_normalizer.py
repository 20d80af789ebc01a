"""Tests for intake payload normalization."""

import math
from datetime import date

import pytest

from voterroll.intake.normalizer import INTAKE_RULES, FailurePolicy, normalize_intake


def test_rule_table_policies():
    assert INTAKE_RULES["age"].on_failure is FailurePolicy.DROP
    assert INTAKE_RULES["part"].on_failure is FailurePolicy.DEFAULT
    assert INTAKE_RULES["part"].default == 0
    assert INTAKE_RULES["dateOfBirth"].on_failure is FailurePolicy.DROP
    assert INTAKE_RULES["location"].on_failure is FailurePolicy.DROP


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2006-03-14", "2006-03-14"),
        ("2006-03-14T10:30:00", "2006-03-14"),
        ("14-03-2006", "2006-03-14"),
        ("14/03/2006", "2006-03-14"),
        (date(2006, 3, 14), "2006-03-14"),
    ],
)
def test_date_of_birth_parsed(raw, expected):
    assert normalize_intake({"dateOfBirth": raw})["dateOfBirth"] == expected


@pytest.mark.parametrize("raw", ["not-a-date", "", "31-02-2006", 12.5, None])
def test_bad_date_of_birth_dropped(raw):
    assert "dateOfBirth" not in normalize_intake({"dateOfBirth": raw})


@pytest.mark.parametrize("raw, expected", [("12", 12), (12, 12), (" 7 ", 7), (3.0, 3)])
def test_part_coerced_to_int(raw, expected):
    stored = normalize_intake({"part": raw})["part"]
    assert stored == expected
    assert isinstance(stored, int)


@pytest.mark.parametrize("raw", ["abc", "", None, -4, 2.5, True, [1], 2**70, "1e30"])
def test_bad_part_defaults_to_zero(raw):
    assert normalize_intake({"part": raw})["part"] == 0


def test_missing_part_stays_missing():
    assert "part" not in normalize_intake({"voterName": "Asha"})


@pytest.mark.parametrize("raw, expected", [("18", 18), (17, 17), ("17.5", 17.5)])
def test_age_coerced_to_number(raw, expected):
    assert normalize_intake({"age": raw})["age"] == expected


@pytest.mark.parametrize("raw", ["abc", "", None, "nan", "inf", False])
def test_bad_age_dropped(raw):
    assert "age" not in normalize_intake({"age": raw})


def test_gender_lower_cased():
    assert normalize_intake({"gender": " Female "})["gender"] == "female"


def test_location_canonical_point():
    stored = normalize_intake({"location": {"coordinates": [77.5, 12.9]}})
    assert stored["location"] == {"type": "Point", "coordinates": [77.5, 12.9]}


@pytest.mark.parametrize(
    "location",
    [
        {"coordinates": [77.5]},
        {"coordinates": [77.5, 12.9, 3.0]},
        {"coordinates": ["77.5", 12.9]},
        {"coordinates": [math.nan, 12.9]},
        {"coordinates": [True, 12.9]},
        {},
        [77.5, 12.9],
        None,
    ],
)
def test_bad_location_dropped(location):
    assert "location" not in normalize_intake({"location": location})


def test_other_fields_pass_through_and_input_untouched():
    payload = {"voterName": "Asha", "epicId": "TN123", "age": "abc", "part": "9"}
    stored = normalize_intake(payload)
    assert stored == {"voterName": "Asha", "epicId": "TN123", "part": 9}
    assert payload["age"] == "abc"
