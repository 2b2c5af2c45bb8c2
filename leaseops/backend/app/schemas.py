from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Literal

Tier = Literal["api", "page", "address_only"]
Decision = Literal["unreviewed", "approved", "rejected"]


class ImportRequest(BaseModel):
    listing_url: str = Field(..., min_length=1)
    organization_id: str = Field(..., min_length=1)


class ImportOut(BaseModel):
    source_url: str
    listing_id: str | None = None

    address: str
    city: str
    state: str
    zip_code: str

    bedrooms: int = 0
    bathrooms: float = 0
    square_feet: int | None = None
    property_type: str = "house"
    rent_price: float = 0
    deposit_amount: float | None = None
    application_fee: float | None = None
    description: str | None = None
    pet_policy: str | None = None
    photos: list[str] = []
    year_built: int | None = None

    tier: Tier
    strategies: list[str] = []
    limited_data: bool
    provider_meta: dict[str, Any] = {}


class SaveImportRequest(BaseModel):
    organization_id: str = Field(..., min_length=1)

    address: str
    city: str
    state: str = Field(..., min_length=2, max_length=2)
    zip_code: str

    bedrooms: int = Field(0, ge=0)
    bathrooms: float = Field(0, ge=0)
    square_feet: int | None = Field(None, ge=0)
    property_type: Literal["house", "apartment", "duplex", "townhouse", "condo"] = "house"
    rent_price: float
    deposit_amount: float | None = Field(None, ge=0)
    application_fee: float | None = Field(None, ge=0)
    description: str | None = None
    pet_policy: str | None = None
    photos: list[str] = []
    year_built: int | None = None

    section_8_accepted: bool = True
    hud_inspection_ready: bool = True

    source_listing_id: str | None = None
    source_url: str | None = None


class PropertyOut(BaseModel):
    id: int
    organization_id: str
    address: str
    city: str
    state: str
    zip_code: str
    bedrooms: int
    bathrooms: float
    square_feet: int | None = None
    property_type: str
    rent_price: float
    deposit_amount: float | None = None
    application_fee: float | None = None
    description: str | None = None
    pet_policy: str | None = None
    status: str
    special_notes: str | None = None
    source_listing_id: str | None = None
    created_at: datetime


class SyncRequest(BaseModel):
    listing_url: str = Field(..., min_length=1)
    organization_id: str = Field(..., min_length=1)


class FieldDiffOut(BaseModel):
    field_key: str
    label: str
    current_display: str
    incoming_display: str
    # presentation copies ($ prefix, truncated); commit always uses incoming_display
    display_current: str
    display_incoming: str
    decision: Decision = "unreviewed"


class SyncOut(BaseModel):
    status: Literal["changes", "no_differences", "limited_data"]
    property_id: int
    tier: Tier
    limited_data: bool
    strategies: list[str] = []
    diffs: list[FieldDiffOut] = []


class DiffIn(BaseModel):
    field_key: str
    label: str | None = None
    current_display: str = ""
    incoming_display: str
    decision: Decision = "unreviewed"


class CommitRequest(BaseModel):
    organization_id: str = Field(..., min_length=1)
    diffs: list[DiffIn]


class CommitFailureOut(BaseModel):
    field_key: str
    incoming_display: str
    error: str


class CommitOut(BaseModel):
    applied: int
    applied_fields: list[str]
    skipped: list[str] = []
    failures: list[CommitFailureOut] = []


class DispatchResult(BaseModel):
    delivered: int
    failed: int
    sinks: int | None = None
    events: int | None = None
