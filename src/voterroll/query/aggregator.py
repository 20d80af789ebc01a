"""Demographic aggregation over voter collections.

Gender buckets use exact, case-sensitive equality against the canonical
values below, at both the root ``sex`` field and the legacy ``s.sex`` field.
Documents with a missing or unrecognized value only count toward ``total``.
"""

import asyncio
from typing import TYPE_CHECKING, Dict, Optional

from pydantic import BaseModel
from sqlalchemy import and_, true
from sqlalchemy.sql.elements import ColumnElement

from .predicates import field_equals

if TYPE_CHECKING:
    from ..database.collection import Collection

# Bucket label -> canonical stored value, in output order
GENDER_BUCKETS: Dict[str, str] = {
    "male": "Male",
    "female": "Female",
    "other": "Third",
}


class GenderSummary(BaseModel):
    male: int
    female: int
    other: int
    total: int


def gender_bucket_predicates(
    model: type,
    base: Optional[ColumnElement] = None,
) -> Dict[str, ColumnElement]:
    """
    One predicate per gender bucket, each scoped by the base filter.

    Args:
        model: Mapped voter model
        base: Base filter from the predicate builder (None for all records)

    Returns:
        Ordered mapping of bucket label to predicate
    """
    base = base if base is not None else true()
    return {
        label: and_(base, field_equals(model, "sex", value))
        for label, value in GENDER_BUCKETS.items()
    }


async def summarize_gender(
    collection: "Collection",
    base: Optional[ColumnElement] = None,
) -> GenderSummary:
    """
    Count each gender bucket and the total over the filtered population.

    All four counts are independent reads and are issued concurrently.
    Pagination never applies here.
    """
    predicates = gender_bucket_predicates(collection.model, base)
    male, female, other, total = await asyncio.gather(
        asyncio.to_thread(collection.count, predicates["male"]),
        asyncio.to_thread(collection.count, predicates["female"]),
        asyncio.to_thread(collection.count, predicates["other"]),
        asyncio.to_thread(collection.count, base),
    )
    return GenderSummary(male=male, female=female, other=other, total=total)
