"""Collaboration Schemas — request bodies and response shapes for the lifecycle API.

Invariants:
    - Free-text fields are stripped and must stay non-empty
    - Amounts are non-negative at the boundary; ordering checked by the engine
    - CollaborationOut is the only shape a request leaves the service in
"""

from datetime import datetime
from math import ceil
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from collabhub.core.clock import ensure_utc
from collabhub.core.domain_types import (
    CampaignType, ContentType, Platform, RequestStatus,
)


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("must not be empty or whitespace")
    return v


class BudgetIn(BaseModel):
    min: float = Field(ge=0)
    max: float = Field(ge=0)
    currency: str | None = Field(None, min_length=3, max_length=3)


class TimelineIn(BaseModel):
    start_date: datetime
    end_date: datetime
    is_flexible: bool = False


class ContentRequirementsIn(BaseModel):
    platforms: list[Platform] = Field(default_factory=list)
    content_types: list[ContentType] = Field(default_factory=list)
    deliverables: list[str] = Field(default_factory=list)
    brand_guidelines: str | None = Field(None, max_length=5000)

    def to_json(self) -> dict:
        return {
            "platforms": sorted({p.value for p in self.platforms}),
            "content_types": sorted({c.value for c in self.content_types}),
            "deliverables": [d.strip() for d in self.deliverables if d.strip()],
            "brand_guidelines": self.brand_guidelines,
        }


class CollaborationCreate(BaseModel):
    """Brand → creator offer."""
    creator_id: str = Field(min_length=1, max_length=64)
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=10_000)
    initial_message: str = Field(min_length=1, max_length=5_000)
    campaign_type: CampaignType
    budget: BudgetIn
    timeline: TimelineIn
    content_requirements: ContentRequirementsIn | None = None
    is_urgent: bool = False
    tags: list[str] = Field(default_factory=list, max_length=20)

    @field_validator("title", "description", "initial_message")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return _strip_required(v)


class CollaborationUpdate(BaseModel):
    """Brand edit of a pending request — only fields present are applied."""
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1, max_length=10_000)
    budget: BudgetIn | None = None
    timeline: TimelineIn | None = None
    content_requirements: ContentRequirementsIn | None = None
    is_urgent: bool | None = None
    tags: list[str] | None = Field(None, max_length=20)

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return None if v is None else _strip_required(v)

    @model_validator(mode="after")
    def require_some_field(self):
        if not self.model_fields_set:
            raise ValueError("update requires at least one field")
        return self


class CounterTimeline(BaseModel):
    start_date: datetime
    end_date: datetime


class CounterOffer(BaseModel):
    budget: float | None = Field(None, ge=0)
    timeline: CounterTimeline | None = None

    @model_validator(mode="after")
    def require_terms(self):
        if self.budget is None and self.timeline is None:
            raise ValueError("counter_offer requires budget or timeline")
        return self


class CreatorResponseIn(BaseModel):
    message: str = Field(min_length=1, max_length=5_000)
    counter_offer: CounterOffer | None = None

    @field_validator("message")
    @classmethod
    def strip_message(cls, v: str) -> str:
        return _strip_required(v)


class BrandResponseIn(BaseModel):
    message: str = Field(min_length=1, max_length=5_000)

    @field_validator("message")
    @classmethod
    def strip_message(cls, v: str) -> str:
        return _strip_required(v)


class StatusOverride(BaseModel):
    """Admin force-set of status (still bound to the state graph)."""
    status: RequestStatus


# --- Responses ----------------------------------------------------------------

class BudgetOut(BaseModel):
    min: float
    max: float
    currency: str


class TimelineOut(BaseModel):
    start_date: datetime
    end_date: datetime
    is_flexible: bool


class NegotiationOut(BaseModel):
    creator_response: dict | None = None
    brand_response: dict | None = None


class CollaborationOut(BaseModel):
    id: UUID
    brand_id: str
    creator_id: str
    title: str
    description: str
    initial_message: str
    campaign_type: str
    budget: BudgetOut
    timeline: TimelineOut
    content_requirements: dict | None
    is_urgent: bool
    tags: list[str]
    status: RequestStatus
    negotiation: NegotiationOut
    viewed_at: datetime | None
    response_latency_hours: float | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, req) -> "CollaborationOut":
        return cls(
            id=req.id,
            brand_id=req.brand_id,
            creator_id=req.creator_id,
            title=req.title,
            description=req.description,
            initial_message=req.initial_message,
            campaign_type=req.campaign_type,
            budget=BudgetOut(
                min=req.budget_min, max=req.budget_max, currency=req.currency,
            ),
            timeline=TimelineOut(
                start_date=ensure_utc(req.start_date),
                end_date=ensure_utc(req.end_date),
                is_flexible=req.is_flexible,
            ),
            content_requirements=req.content_requirements,
            is_urgent=req.is_urgent,
            tags=list(req.tags or []),
            status=RequestStatus(req.status),
            negotiation=NegotiationOut(
                creator_response=req.creator_response,
                brand_response=req.brand_response,
            ),
            viewed_at=ensure_utc(req.viewed_at) if req.viewed_at else None,
            response_latency_hours=req.response_latency_hours,
            created_at=ensure_utc(req.created_at),
            updated_at=ensure_utc(req.updated_at),
        )


class PaginationOut(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationOut":
        return cls(page=page, limit=limit, total=total, pages=ceil(total / limit))


class CollaborationPage(BaseModel):
    items: list[CollaborationOut]
    pagination: PaginationOut
