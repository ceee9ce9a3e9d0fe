"""
Taxonomy routes.
Expose the status taxonomy and country registry so the map client stays in sync.
"""
from fastapi import APIRouter
from src.models.access_status import AccessStatus, STATUS_COLORS
from src.models.country_codes import COUNTRY_CODES
from src.models.dto.substance_dto import CountryCodesResponse, StatusLegendEntry, StatusLegendResponse

router = APIRouter(prefix="/v1/api", tags=["Taxonomy"])


@router.get("/statuses", response_model=StatusLegendResponse)
async def get_statuses():
    """Access statuses with their map colours, in canonical order."""
    return StatusLegendResponse(
        statuses=[
            StatusLegendEntry(status=status.value, color=STATUS_COLORS[status])
            for status in AccessStatus
        ]
    )


@router.get("/countries", response_model=CountryCodesResponse)
async def get_countries():
    """Country codes the pipeline resolves."""
    return CountryCodesResponse(country_codes=list(COUNTRY_CODES), count=len(COUNTRY_CODES))
