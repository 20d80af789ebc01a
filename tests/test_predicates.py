"""Tests for the schema-tolerant predicate builder."""

import pytest
from sqlalchemy.sql.elements import True_

from conftest import make_voter
from voterroll.database.schema import Voter
from voterroll.query.fields import FIELD_MAP, field_paths
from voterroll.query.predicates import (
    NAME_AND_NUMBER,
    build_search_predicate,
    build_structured_predicate,
    escape_like,
    field_between,
    field_equals,
)


@pytest.fixture
def voters(collections):
    collection = collections.voters
    collection.insert_many(
        [
            make_voter("Ravi Kumar", "ABC1234567", sex="Male", part=12),
            make_voter("Lakshmi Devi", "XYZ7654321", sex="Female", part=12, legacy=True),
            make_voter("Anand 50% Rao", "QWE1111111", sex="Male", part="7", part_key="part_no"),
            make_voter("Meena_R", "ASD2222222", sex="Third", part=3, legacy=True),
            {"Name": "No Number"},
        ]
    )
    return collection


def _names(collection, predicate):
    return sorted(
        doc.get("Name") or doc["s"]["Name"] for doc in collection.find(predicate)
    )


@pytest.mark.parametrize("term", [None, "", "   ", "\t"])
def test_blank_term_matches_everything(voters, term):
    predicate = build_search_predicate(Voter, term, NAME_AND_NUMBER)
    assert isinstance(predicate, True_)
    assert voters.count(predicate) == 5


def test_matches_root_and_legacy_locations(voters):
    assert _names(voters, build_search_predicate(Voter, "ravi", NAME_AND_NUMBER)) == ["Ravi Kumar"]
    assert _names(voters, build_search_predicate(Voter, "LAKSHMI", NAME_AND_NUMBER)) == ["Lakshmi Devi"]


def test_matches_number_field_case_insensitively(voters):
    assert _names(voters, build_search_predicate(Voter, "xyz765", NAME_AND_NUMBER)) == ["Lakshmi Devi"]


def test_term_is_trimmed(voters):
    assert _names(voters, build_search_predicate(Voter, "  kumar  ", NAME_AND_NUMBER)) == ["Ravi Kumar"]


def test_no_match_returns_nothing(voters):
    assert voters.count(build_search_predicate(Voter, "zzzz", NAME_AND_NUMBER)) == 0


def test_like_wildcards_are_literal(voters):
    # '%' and '_' would match anything if treated as patterns
    assert _names(voters, build_search_predicate(Voter, "50%", NAME_AND_NUMBER)) == ["Anand 50% Rao"]
    assert _names(voters, build_search_predicate(Voter, "_", NAME_AND_NUMBER)) == ["Meena_R"]
    assert voters.count(build_search_predicate(Voter, "%", NAME_AND_NUMBER)) == 1


def test_escape_like_escapes_backslash_first():
    assert escape_like(r"a\b%c_d") == r"a\\b\%c\_d"


def test_field_equals_tolerates_part_key_casing_and_text_numbers(voters):
    assert _names(voters, field_equals(Voter, "part", 12)) == ["Lakshmi Devi", "Ravi Kumar"]
    assert _names(voters, field_equals(Voter, "part", 7)) == ["Anand 50% Rao"]


def test_field_equals_is_case_sensitive(voters):
    assert voters.count(field_equals(Voter, "sex", "Male")) == 2
    assert voters.count(field_equals(Voter, "sex", "male")) == 0


def test_field_between_checks_both_locations(collections):
    collection = collections.voters
    collection.insert_many(
        [
            make_voter("A", "1", age=65),
            make_voter("B", "2", age="70", legacy=True),
            make_voter("C", "3", age=40),
            make_voter("D", "4"),
        ]
    )
    assert _names(collection, field_between(Voter, "age", 60, 75)) == ["A", "B"]


def test_field_between_ignores_non_numeric_values(collections):
    collection = collections.voters
    collection.insert_many(
        [
            make_voter("Kid", "1", age=5),
            make_voter("Unknown", "2", age="NA"),
            make_voter("Blank", "3", age=""),
            make_voter("Legacy NA", "4", age="NA", legacy=True),
            make_voter("Negative", "5", age="-3"),
            make_voter("Decimal", "6", age="7.5", legacy=True),
        ]
    )
    assert _names(collection, field_between(Voter, "age", 0, 10)) == ["Decimal", "Kid"]


def test_structured_predicate_combines_name_and_part(voters):
    assert _names(voters, build_structured_predicate(Voter, name="devi", part_number=12)) == ["Lakshmi Devi"]
    assert _names(voters, build_structured_predicate(Voter, part_number=12)) == ["Lakshmi Devi", "Ravi Kumar"]
    assert voters.count(build_structured_predicate(Voter)) == 5


def test_unknown_field_is_rejected():
    with pytest.raises(ValueError):
        field_paths("nope")


def test_every_voter_field_has_a_location():
    for field, paths in FIELD_MAP.items():
        assert paths, field
