"""
Substance API routes.
Handles HTTP endpoints for substance resolution and stored dataset reads.
"""
from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool
from src.services.resolution_service import ResolutionService
from src.core.dependencies import get_resolution_service
from src.models.dto.substance_dto import (
    SearchSubstanceRequest,
    SearchSubstanceResponse,
    SubstanceDatasetResponse,
    ErrorResponse
)

router = APIRouter(prefix="/v1/api", tags=["Substances"])


@router.post(
    "/search-substance",
    response_model=SearchSubstanceResponse,
    status_code=status.HTTP_200_OK,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}, 503: {"model": ErrorResponse}}
)
async def search_substance(
    request: SearchSubstanceRequest,
    resolution_service: ResolutionService = Depends(get_resolution_service)
):
    """
    Resolve a substance to its per-country access statuses.

    - **substance**: Free-text substance name

    Served from cache when a dataset exists; otherwise generated, stored and counted.
    """
    # Resolution blocks on the store and the generator
    return await run_in_threadpool(resolution_service.resolve, request.substance)


@router.get(
    "/substances/{substance}",
    response_model=SubstanceDatasetResponse,
    responses={404: {"model": ErrorResponse}}
)
async def get_substance_dataset(
    substance: str,
    resolution_service: ResolutionService = Depends(get_resolution_service)
):
    """
    Retrieve the stored dataset for a substance. Never triggers generation.
    """
    return await run_in_threadpool(resolution_service.get_dataset, substance)
