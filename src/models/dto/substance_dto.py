"""
Data Transfer Objects for the Substance Access API.
Defines request and response schemas for API endpoints.
"""
from datetime import datetime
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field, field_validator

# Keeps SUBSTANCE#<name> well under the 2048-byte DynamoDB partition key limit
MAX_SUBSTANCE_LENGTH = 200


class SearchSubstanceRequest(BaseModel):
    """Request schema for resolving a substance."""
    substance: Optional[str] = Field(
        default=None,
        max_length=MAX_SUBSTANCE_LENGTH,
        description="Free-text substance name"
    )

    @field_validator('substance')
    @classmethod
    def strip_substance(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip()


class SearchSubstanceResponse(BaseModel):
    """Response schema for a successful resolution."""
    success: bool = True
    source: Literal["cache", "generated"] = Field(..., description="Where the rows came from")
    rows: int = Field(..., ge=0, description="Number of country records for the substance")


class ErrorResponse(BaseModel):
    """Response schema for failed requests."""
    error: str
    details: Optional[str] = None


class CountryAccessResponse(BaseModel):
    """Access status of a substance in one country."""
    access_status: str
    display_status: str
    reference_link: Optional[str] = None
    updated_at: datetime


class SubstanceDatasetResponse(BaseModel):
    """Response schema for a stored substance dataset."""
    substance: str
    countries: Dict[str, CountryAccessResponse]
    count: int


class StatusLegendEntry(BaseModel):
    status: str
    color: str


class StatusLegendResponse(BaseModel):
    """Status taxonomy in canonical order."""
    statuses: List[StatusLegendEntry]


class CountryCodesResponse(BaseModel):
    country_codes: List[str]
    count: int
