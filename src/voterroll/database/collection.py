"""Collection handles: the store interface the query engine talks to.

Each handle wraps one mapped table and a session factory. Every call opens
its own short-lived session, so independent reads for one request can run on
worker threads at the same time.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import distinct, true
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.sql.elements import ColumnElement

from ..errors import StoreError
from ..utils.id_generator import new_record_id
from ..utils.logging import get_logger
from ..utils.time import utc_now_z
from .schema import Age60AboveVoter, SoonVoter, Voter, VoterDocumentMixin
from .sqlite_client import get_engine, get_session_factory

logger = get_logger(__name__)


def _row_to_document(row: VoterDocumentMixin) -> Dict[str, Any]:
    doc = dict(row.document or {})
    doc["_id"] = row.id
    if row.exposes_created_at:
        doc["createdAt"] = row.created_at_utc
    return doc


class Collection:
    """Store handle for one logical voter collection."""

    def __init__(self, session_factory: sessionmaker, model: type, name: str | None = None):
        self._session_factory = session_factory
        self.model = model
        self.name = name or model.__tablename__

    def _fail(self, operation: str, exc: SQLAlchemyError) -> StoreError:
        logger.error(f"Store {operation} failed on {self.name}: {exc}")
        return StoreError(f"{operation} on {self.name} failed: {exc}")

    def find(
        self,
        predicate: Optional[ColumnElement] = None,
        skip: int = 0,
        limit: int | None = None,
        newest_first: bool = False,
    ) -> List[Dict[str, Any]]:
        """
        Find documents matching a predicate, in insertion order.

        Args:
            predicate: Boolean clause (None matches everything)
            skip: Number of matching documents to skip
            limit: Maximum number of documents to return (None for all)
            newest_first: Reverse insertion order

        Returns:
            List of documents with ``_id`` set
        """
        order = self.model.seq.desc() if newest_first else self.model.seq.asc()
        try:
            with self._session_factory() as session:
                q = session.query(self.model).filter(predicate if predicate is not None else true())
                q = q.order_by(order).offset(skip)
                if limit is not None:
                    q = q.limit(limit)
                return [_row_to_document(row) for row in q.all()]
        except SQLAlchemyError as e:
            raise self._fail("find", e) from e

    def count(self, predicate: Optional[ColumnElement] = None) -> int:
        try:
            with self._session_factory() as session:
                q = session.query(self.model).filter(predicate if predicate is not None else true())
                return q.count()
        except SQLAlchemyError as e:
            raise self._fail("count", e) from e

    def find_one(self, predicate: Optional[ColumnElement] = None) -> Optional[Dict[str, Any]]:
        found = self.find(predicate, limit=1)
        return found[0] if found else None

    def find_by_id(self, record_id: str) -> Optional[Dict[str, Any]]:
        return self.find_one(self.model.id == record_id)

    def distinct_values(self, expressions: Sequence[ColumnElement]) -> List[Any]:
        """
        Distinct non-null values across several expressions.

        Args:
            expressions: Column expressions, one per physical field location

        Returns:
            Unordered list of distinct values, deduplicated across expressions
        """
        seen = []
        try:
            with self._session_factory() as session:
                for expr in expressions:
                    rows = session.query(distinct(expr)).filter(expr.isnot(None)).all()
                    for (value,) in rows:
                        if value not in seen:
                            seen.append(value)
        except SQLAlchemyError as e:
            raise self._fail("distinct", e) from e
        return seen

    def insert(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a single document atomically.

        Returns:
            The stored document with its assigned ``_id``
        """
        return self.insert_many([document])[0]

    def insert_many(self, documents: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        rows = []
        try:
            with self._session_factory() as session:
                for document in documents:
                    body = {k: v for k, v in document.items() if k not in ("_id", "createdAt")}
                    row = self.model(
                        id=new_record_id(),
                        created_at_utc=utc_now_z(),
                        document=body,
                    )
                    session.add(row)
                    rows.append(row)
                session.commit()
        except SQLAlchemyError as e:
            raise self._fail("insert", e) from e
        logger.debug(f"Inserted {len(rows)} document(s) into {self.name}")
        return [_row_to_document(row) for row in rows]


@dataclass(frozen=True)
class Collections:
    """The three logical voter collections, passed explicitly to the executor."""
    voters: Collection
    age60_above: Collection
    soon_voters: Collection

    def by_name(self, name: str) -> Collection:
        aliases = {
            "voters": self.voters,
            "age60": self.age60_above,
            "age60_above": self.age60_above,
            "soon": self.soon_voters,
            "soon_voters": self.soon_voters,
        }
        if name not in aliases:
            raise ValueError(f"Unknown collection: {name}")
        return aliases[name]


def open_collections(engine: Engine | None = None, sqlite_path: str | None = None) -> Collections:
    """
    Build collection handles over one engine.

    Args:
        engine: Existing engine (tables must exist)
        sqlite_path: Path to a SQLite file, used when no engine is given

    Returns:
        Collections bundle
    """
    if engine is None:
        if not sqlite_path:
            raise ValueError("Either engine or sqlite_path is required")
        engine = get_engine(sqlite_path)
    factory = get_session_factory(engine)
    return Collections(
        voters=Collection(factory, Voter),
        age60_above=Collection(factory, Age60AboveVoter),
        soon_voters=Collection(factory, SoonVoter),
    )
