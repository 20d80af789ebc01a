"""Voters API: list, search, lookup, partition stats and intake.

Every read for a request (page, total count, gender buckets) is dispatched
concurrently and joined under one deadline. A request either returns a
complete envelope or raises; partial results are never returned.
"""

import asyncio
import math
from typing import TYPE_CHECKING, Any, Awaitable, Dict, List, Optional

from ..errors import QueryTimeoutError
from ..intake.normalizer import CoercionError, normalize_intake, parse_part_number
from ..query.aggregator import summarize_gender
from ..query.fields import text_locations
from ..query.pagination import PageWindow, page_window, paginate
from ..query.predicates import (
    INTAKE_SEARCH_FIELDS,
    NAME_AND_NUMBER,
    build_search_predicate,
    build_structured_predicate,
    field_between,
    field_equals,
)
from ..utils.logging import get_logger
from .models import Envelope

if TYPE_CHECKING:
    from ..database.collection import Collection, Collections

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


async def _within_deadline(timeout: Optional[float], *calls: Awaitable) -> List[Any]:
    """Run independent reads concurrently; fail the whole request on timeout."""
    try:
        return await asyncio.wait_for(asyncio.gather(*calls), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"Request exceeded deadline of {timeout}s")
        raise QueryTimeoutError(timeout) from None


async def _list_page(
    collection: "Collection",
    predicate,
    window: PageWindow,
    timeout: Optional[float],
    newest_first: bool = False,
    with_gender_summary: bool = False,
) -> Envelope:
    calls = [
        asyncio.to_thread(collection.find, predicate, window.skip, window.limit, newest_first),
        asyncio.to_thread(collection.count, predicate),
    ]
    if with_gender_summary:
        calls.append(summarize_gender(collection, predicate))
    results = await _within_deadline(timeout, *calls)

    items, total = results[0], results[1]
    logger.debug(f"{collection.name}: page {window.page} returned {len(items)} of {total}")
    return Envelope(
        data=items,
        pagination=paginate(window, total),
        genderSummary=results[2] if with_gender_summary else None,
    )


def _part_number(value: Any) -> Optional[int]:
    try:
        return parse_part_number(value)
    except CoercionError:
        return None


async def list_voters(
    collections: "Collections",
    page: Any = None,
    limit: Any = None,
    q: Optional[str] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
) -> Envelope:
    """
    Search the primary roll by name or EPIC number, paginated.

    Args:
        collections: Collection handles
        page: Raw page parameter (defaults to 1)
        limit: Raw limit parameter (defaults to 20)
        q: Free-text search term; matches root and legacy name/number

    Returns:
        Envelope with data and pagination
    """
    collection = collections.voters
    predicate = build_search_predicate(collection.model, q, NAME_AND_NUMBER)
    return await _list_page(collection, predicate, page_window(page, limit), timeout)


async def list_age60_above_voters(
    collections: "Collections",
    page: Any = None,
    limit: Any = None,
    q: Optional[str] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
) -> Envelope:
    """
    Search the age 60+ extract, paginated, with a gender summary.

    The gender summary covers the whole filtered population, not the page.
    """
    collection = collections.age60_above
    predicate = build_search_predicate(collection.model, q, NAME_AND_NUMBER)
    return await _list_page(
        collection,
        predicate,
        page_window(page, limit),
        timeout,
        with_gender_summary=True,
    )


async def list_soon_voters(
    collections: "Collections",
    page: Any = None,
    limit: Any = None,
    q: Optional[str] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
) -> Envelope:
    """Intake listing, newest first, searchable by voter name or EPIC id."""
    collection = collections.soon_voters
    predicate = build_search_predicate(collection.model, q, INTAKE_SEARCH_FIELDS)
    return await _list_page(collection, predicate, page_window(page, limit), timeout, newest_first=True)


async def search_voters(
    collections: "Collections",
    name: Optional[str] = None,
    part_no: Any = None,
    page: Any = None,
    limit: Any = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
) -> Envelope:
    """
    Structured search on the primary roll: name substring and/or part number.

    An unparseable part number matches nothing rather than being ignored.
    """
    collection = collections.voters
    part_number = None
    if part_no not in (None, ""):
        part_number = _part_number(part_no)
        if part_number is None:
            window = page_window(page, limit)
            return Envelope(data=[], pagination=paginate(window, 0))
    predicate = build_structured_predicate(collection.model, name=name, part_number=part_number)
    return await _list_page(collection, predicate, page_window(page, limit), timeout)


async def list_voters_by_age_range(
    collections: "Collections",
    min_age: Any,
    max_age: Any,
    page: Any = None,
    limit: Any = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
) -> Envelope:
    """
    Primary roll records whose age lies in [min_age, max_age].

    Raises:
        ValueError: If either bound is not numeric or min_age > max_age
    """
    try:
        low, high = float(min_age), float(max_age)
    except (TypeError, ValueError):
        raise ValueError("minAge and maxAge must be numeric") from None
    if not (math.isfinite(low) and math.isfinite(high)) or low > high:
        raise ValueError("minAge must be less than or equal to maxAge")

    collection = collections.voters
    predicate = field_between(collection.model, "age", low, high)
    return await _list_page(collection, predicate, page_window(page, limit), timeout)


async def get_voter_by_id(
    collections: "Collections",
    voter_id: str,
    timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
) -> Optional[Envelope]:
    """
    Look up a primary roll record by identifier.

    Returns:
        Envelope with the record, or None if not found
    """
    (record,) = await _within_deadline(timeout, asyncio.to_thread(collections.voters.find_by_id, voter_id))
    if record is None:
        return None
    return Envelope(data=record)


async def get_voters_by_part(
    collections: "Collections",
    part_number: Any,
    page: Any = None,
    limit: Any = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
) -> Optional[Envelope]:
    """
    Records in one polling-station partition, paginated.

    The part number is matched under both ``Part_no`` and ``part_no``.

    Returns:
        Envelope with data and pagination, or None if the partition is empty
        (or the part number is not a valid non-negative integer)
    """
    number = _part_number(part_number)
    if number is None:
        return None
    collection = collections.voters
    predicate = field_equals(collection.model, "part", number)
    envelope = await _list_page(collection, predicate, page_window(page, limit), timeout)
    if envelope.pagination.totalCount == 0:
        return None
    return envelope


async def get_part_gender_stats(
    collections: "Collections",
    part_number: Any,
    timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
) -> Optional[Envelope]:
    """
    Gender summary for one partition.

    Returns:
        Envelope with the part number as data and the counts under
        genderSummary, or None if the partition is empty
    """
    number = _part_number(part_number)
    if number is None:
        return None
    collection = collections.voters
    predicate = field_equals(collection.model, "part", number)
    (summary,) = await _within_deadline(timeout, summarize_gender(collection, predicate))
    if summary.total == 0:
        return None
    return Envelope(data={"part": number}, genderSummary=summary)


async def list_part_numbers(
    collections: "Collections",
    timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
) -> Envelope:
    """Distinct part numbers on the primary roll, ascending."""
    collection = collections.voters
    locations = text_locations(collection.model, "part")
    (values,) = await _within_deadline(timeout, asyncio.to_thread(collection.distinct_values, locations))
    numbers = sorted({n for n in (_part_number(v) for v in values) if n is not None})
    return Envelope(data=numbers)


async def create_soon_voter(
    collections: "Collections",
    payload: Dict[str, Any],
    timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
) -> Envelope:
    """
    Normalize an intake payload and persist it with a single insert.

    Returns:
        Envelope with the stored document (including its assigned ``_id``)
    """
    document = normalize_intake(payload)
    (stored,) = await _within_deadline(timeout, asyncio.to_thread(collections.soon_voters.insert, document))
    logger.info(f"Created soon voter {stored['_id']}")
    return Envelope(data=stored)

