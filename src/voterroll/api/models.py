"""Response envelopes returned by the API layer."""

from typing import Any, Dict, Optional

from pydantic import BaseModel

from ..query.aggregator import GenderSummary
from ..query.pagination import Pagination


class Envelope(BaseModel):
    """Uniform response: success flag, data, and optional metadata."""
    success: bool = True
    data: Any = None
    pagination: Optional[Pagination] = None
    genderSummary: Optional[GenderSummary] = None
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-shaped dict, omitting metadata that does not apply."""
        dumped = self.model_dump()
        return {key: value for key, value in dumped.items() if value is not None or (key == "data" and self.success)}


def failure_envelope(exc: BaseException) -> Envelope:
    """Generic failure envelope for store or timeout errors."""
    return Envelope(success=False, message=str(exc) or exc.__class__.__name__)
