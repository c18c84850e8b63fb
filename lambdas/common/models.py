# lambdas/common/models.py
"""
Pydantic models for the canonical event representation and the DORA
collections (changes, deployments, incidents) kept by the repositories.
Field names are snake_case in Python and camelCase on the wire.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN = "UNKNOWN"


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict:
        """Serializes with camelCase keys, leaving out unset optional values."""
        return self.model_dump(by_alias=True, exclude_none=True)


class EventDto(CamelModel):
    """
    The normalized result of parsing a single webhook.
    time_resolved is only set for closed and unlabeled events.
    """
    event_time: str = Field(..., alias='eventTime')
    time_created: str = Field(..., alias='timeCreated')
    time_resolved: Optional[str] = Field(None, alias='timeResolved')
    id: str
    title: str
    message: str

    @classmethod
    def unknown(cls) -> "EventDto":
        return cls(
            event_time=UNKNOWN,
            time_created=UNKNOWN,
            time_resolved=UNKNOWN,
            id=UNKNOWN,
            title=UNKNOWN,
            message=UNKNOWN,
        )


class Event(EventDto):
    """An EventDto as stored, tagged with its product and classification."""
    product: str
    event_type: str = Field(..., alias='eventType')
    status: str


class Change(CamelModel):
    product: str
    id: str
    event_time: str = Field(..., alias='eventTime')
    time_created: str = Field(..., alias='timeCreated')
    time_resolved: Optional[str] = Field(None, alias='timeResolved')


class Deployment(CamelModel):
    product: str
    id: str
    event_time: str = Field(..., alias='eventTime')
    time_created: str = Field(..., alias='timeCreated')
    changes: List[str] = Field(default_factory=list)


class Incident(CamelModel):
    product: str
    id: str
    event_time: str = Field(..., alias='eventTime')
    time_created: str = Field(..., alias='timeCreated')
    time_resolved: Optional[str] = Field(None, alias='timeResolved')
    title: str = ""


class DataRequest(CamelModel):
    """
    A keyed query against a repository. The key is "<KIND>_<product>",
    e.g. "DEPLOYMENT_eHawk"; from/to are Unix timestamps in seconds.
    """
    key: str
    from_time: Optional[str] = Field(None, alias='from')
    to_time: Optional[str] = Field(None, alias='to')
    offset: int = 0


class RequestDto(CamelModel):
    """Validated query parameters for the read endpoints."""
    repo: str
    from_time: str = Field(..., alias='from')
    to_time: str = Field(..., alias='to')
    offset: int = 0
