"""Pytest configuration and fixtures."""

import pytest

from voterroll.database.collection import open_collections
from voterroll.database.sqlite_client import get_engine


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite engine; worker threads need a shared database file."""
    engine = get_engine(str(tmp_path / "voterroll.db"))
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def collections(engine):
    return open_collections(engine=engine)


def make_voter(name, number, sex=None, part=None, legacy=False, part_key="Part_no", age=None):
    """Build a voter document either at the root or under the legacy 's' object."""
    fields = {"Name": name, "Number": number}
    if sex is not None:
        fields["sex"] = sex
    if age is not None:
        fields["Age"] = age
    document = {"s": fields} if legacy else dict(fields)
    if part is not None:
        document[part_key] = part
    return document
