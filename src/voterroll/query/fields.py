"""Logical field map for the voter collections.

Historical loads put the same semantic field in different physical places:
at the document root (``Name``), under the legacy ``s`` object (``s.Name``),
or under a differently cased key (``Part_no`` vs ``part_no``). Every
predicate and aggregate resolves fields through this table so the read paths
agree on where a value can live.
"""

from typing import Dict, List, Tuple

from sqlalchemy.sql.elements import ColumnElement

FieldPath = Tuple[str, ...]

FIELD_MAP: Dict[str, Tuple[FieldPath, ...]] = {
    "name": (("Name",), ("s", "Name")),
    "number": (("Number",), ("s", "Number")),
    "sex": (("sex",), ("s", "sex")),
    "part": (("Part_no",), ("part_no",)),
    "age": (("Age",), ("s", "Age")),
    # Intake collection fields (root only)
    "voter_name": (("voterName",),),
    "epic_id": (("epicId",),),
}


def field_paths(field: str) -> Tuple[FieldPath, ...]:
    """Physical locations for a logical field name."""
    try:
        return FIELD_MAP[field]
    except KeyError:
        raise ValueError(f"Unknown logical field: {field}") from None


def json_locations(model: type, field: str) -> List[ColumnElement]:
    """
    JSON expressions for every physical location of a logical field.

    Args:
        model: Mapped voter model with a ``document`` JSON column
        field: Logical field name from FIELD_MAP

    Returns:
        One raw JSON-extract expression per location
    """
    locations = []
    for path in field_paths(field):
        if len(path) == 1:
            locations.append(model.document[path[0]])
        else:
            locations.append(model.document[path])
    return locations


def text_locations(model: type, field: str) -> List[ColumnElement]:
    """Same as json_locations, with each value extracted as a scalar."""
    return [loc.as_string() for loc in json_locations(model, field)]
