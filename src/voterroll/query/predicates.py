"""Schema-tolerant predicate builder.

Search terms are matched as literal, case-insensitive substrings. LIKE
wildcards (``%``, ``_``) and the escape character itself are escaped, so a
term such as ``50%`` only matches values containing the text ``50%``.
Case folding uses SQLite lower(), which only folds ASCII letters, so
non-ASCII names match case-sensitively.
"""

from typing import Any, Optional, Sequence

from sqlalchemy import Float, and_, cast, or_, true
from sqlalchemy.sql.elements import ColumnElement

from .fields import text_locations

LIKE_ESCAPE = "\\"

NAME_AND_NUMBER = ("name", "number")
INTAKE_SEARCH_FIELDS = ("voter_name", "epic_id")

# Digits first, then nothing but digits and dots
NUMERIC_GLOB = "[0-9]*"
NON_NUMERIC_GLOB = "*[^0-9.]*"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term is matched literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def normalize_term(term: Optional[str]) -> str:
    if term is None:
        return ""
    return str(term).strip()


def build_search_predicate(model: type, term: Optional[str], fields: Sequence[str]) -> ColumnElement:
    """
    Build a predicate matching the term in any of the given fields.

    Every field is checked at each of its physical locations (root and
    legacy nested), and the conditions are OR-ed together.

    Args:
        model: Mapped voter model
        term: Free-text search term (None, empty or whitespace matches all)
        fields: Logical field names from FIELD_MAP

    Returns:
        SQLAlchemy boolean clause
    """
    term = normalize_term(term)
    if not term:
        return true()

    pattern = f"%{escape_like(term)}%"
    conditions = []
    for field in fields:
        for location in text_locations(model, field):
            conditions.append(location.ilike(pattern, escape=LIKE_ESCAPE))
    return or_(*conditions)


def field_equals(model: type, field: str, value: Any) -> ColumnElement:
    """
    Exact, case-sensitive equality at any location of a field.

    Integers also match their decimal string form, since older loads stored
    numeric fields as text.
    """
    conditions = []
    for location in text_locations(model, field):
        conditions.append(location == value)
        if isinstance(value, int) and not isinstance(value, bool):
            conditions.append(location == str(value))
    return or_(*conditions)


def field_between(model: type, field: str, low: float, high: float) -> ColumnElement:
    """
    Numeric range (inclusive) at any location of a field.

    Only unsigned decimal values take part. CAST would turn text such as
    "NA" into 0.0, so values are first matched against NUMERIC_GLOB.
    """
    conditions = []
    for location in text_locations(model, field):
        looks_numeric = and_(
            location.op("GLOB", is_comparison=True)(NUMERIC_GLOB),
            ~location.op("GLOB", is_comparison=True)(NON_NUMERIC_GLOB),
        )
        numeric = cast(location, Float)
        conditions.append(and_(location.isnot(None), looks_numeric, numeric.between(low, high)))
    return or_(*conditions)


def build_structured_predicate(
    model: type,
    name: Optional[str] = None,
    part_number: Optional[int] = None,
) -> ColumnElement:
    """
    Combine an optional name substring with an optional part number.

    Args:
        model: Mapped voter model
        name: Name substring (root or legacy location)
        part_number: Exact part number

    Returns:
        SQLAlchemy boolean clause (match all when both are absent)
    """
    clauses = [build_search_predicate(model, name, ("name",))]
    if part_number is not None:
        clauses.append(field_equals(model, "part", part_number))
    return and_(*clauses)
