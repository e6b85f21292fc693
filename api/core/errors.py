"""Domain error taxonomy shared by the workflow services.

Services raise these; ``api.main`` renders them as ``{"detail": message}``
with the carried status code.
"""

from dataclasses import dataclass, field
from typing import Generic, List, TypeVar

T = TypeVar("T")


@dataclass(eq=False)
class WorkflowError(Exception):
    message: str
    status_code: int = 500

    def __str__(self) -> str:
        return self.message


@dataclass(eq=False)
class Unauthorized(WorkflowError):
    """Missing or invalid bearer credential."""
    status_code: int = 401


@dataclass(eq=False)
class Forbidden(WorkflowError):
    """Authenticated, but not allowed to touch this record."""
    status_code: int = 403


@dataclass(eq=False)
class NotFound(WorkflowError):
    status_code: int = 404


@dataclass(eq=False)
class ValidationFailed(WorkflowError):
    """Rejected before any write happened."""
    status_code: int = 400


@dataclass(eq=False)
class Conflict(WorkflowError):
    status_code: int = 409


@dataclass(eq=False)
class UpstreamFailure(WorkflowError):
    """Record store, blob store or LLM unreachable or erroring."""
    status_code: int = 500


@dataclass
class PartialResult(Generic[T]):
    """Rows a batch join resolved, plus how many it had to drop."""
    items: List[T] = field(default_factory=list)
    skipped: int = 0

    @property
    def partial(self) -> bool:
        return self.skipped > 0
