"""Tests for gender aggregation."""

import asyncio

import pytest

from conftest import make_voter
from voterroll.database.schema import Age60AboveVoter
from voterroll.query.aggregator import GENDER_BUCKETS, gender_bucket_predicates, summarize_gender
from voterroll.query.predicates import NAME_AND_NUMBER, build_search_predicate


@pytest.fixture
def age60(collections):
    collection = collections.age60_above
    collection.insert_many(
        [
            make_voter("Ravi", "A1", sex="Male"),
            make_voter("Raju", "A2", sex="Male", legacy=True),
            make_voter("Rani", "A3", sex="Female"),
            make_voter("Sita", "A4", sex="Female", legacy=True),
            make_voter("Kiran", "A5", sex="Third"),
            make_voter("Ramesh", "A6", sex="male"),  # unnormalized casing
            make_voter("Unknown", "A7"),
        ]
    )
    return collection


def test_bucket_order_is_fixed():
    assert list(GENDER_BUCKETS) == ["male", "female", "other"]
    assert list(gender_bucket_predicates(Age60AboveVoter)) == ["male", "female", "other"]


def test_summary_counts_root_and_legacy(age60):
    summary = asyncio.run(summarize_gender(age60))
    assert summary.model_dump() == {"male": 2, "female": 2, "other": 1, "total": 7}


def test_unrecognized_values_only_count_toward_total(age60):
    summary = asyncio.run(summarize_gender(age60))
    assert summary.male + summary.female + summary.other < summary.total


def test_summary_respects_base_filter(age60):
    base = build_search_predicate(Age60AboveVoter, "ra", NAME_AND_NUMBER)
    summary = asyncio.run(summarize_gender(age60, base))
    # Ravi, Raju, Rani, Kiran, Ramesh
    assert summary.model_dump() == {"male": 2, "female": 1, "other": 1, "total": 5}


def test_summary_sums_to_total_when_all_recognized(collections):
    collection = collections.age60_above
    collection.insert_many([make_voter("A", "1", sex="Male"), make_voter("B", "2", sex="Female", legacy=True)])
    summary = asyncio.run(summarize_gender(collection))
    assert summary.male + summary.female + summary.other == summary.total == 2


def test_empty_collection(collections):
    summary = asyncio.run(summarize_gender(collections.age60_above))
    assert summary.model_dump() == {"male": 0, "female": 0, "other": 0, "total": 0}
