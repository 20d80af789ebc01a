from sqlalchemy import JSON, Column, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Largest integer SQLite can bind or store
SQLITE_MAX_INTEGER = 2**63 - 1


class VoterDocumentMixin:
    """Columns shared by every voter collection.

    The record body is kept as a JSON document so that root-level fields and
    the legacy nested ``s`` object can coexist in the same table.
    """

    seq = Column(Integer, primary_key=True, autoincrement=True)  # insertion order
    id = Column(String, nullable=False, unique=True, index=True)  # opaque, immutable
    created_at_utc = Column(String, nullable=False)  # ISO 8601 string
    document = Column(JSON, nullable=False)

    # Whether createdAt is exposed on returned documents
    exposes_created_at = False


class Voter(VoterDocumentMixin, Base):
    """Primary voter roll."""
    __tablename__ = "voters"


class Age60AboveVoter(VoterDocumentMixin, Base):
    """Age 60 and above extract."""
    __tablename__ = "age60_above_voters"


class SoonVoter(VoterDocumentMixin, Base):
    """Soon-to-be-eligible intake records."""
    __tablename__ = "soon_voters"

    exposes_created_at = True
