"""
Document change events.

The hosting platform fires a trigger on every qualifying document write.
Each delivery is normalised into a ``DocumentChange``: which entity, which
operation, and the before/after snapshots. Notification logic only ever
sees this envelope, never the storage trigger mechanism itself.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class EntityType(str, Enum):
    """Watched collections."""
    REPORT = "report"
    ANNOUNCEMENT = "announcement"


class Operation(str, Enum):
    """Write operations that fire triggers."""
    CREATE = "create"
    UPDATE = "update"


class DocumentChange(BaseModel):
    """
    One trigger delivery.

    ``before`` is absent for creates; ``after`` is always present.
    ``event_id`` is the platform's delivery id, used to drop redeliveries.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    entity: EntityType
    operation: Operation
    document_id: str = Field(min_length=1)
    before: Optional[Dict[str, Any]] = None
    after: Dict[str, Any] = Field(default_factory=dict)
    event_id: Optional[str] = None

    @model_validator(mode="after")
    def _update_needs_before(self) -> "DocumentChange":
        if self.operation == Operation.UPDATE and self.before is None:
            raise ValueError("update events require a 'before' snapshot")
        return self
