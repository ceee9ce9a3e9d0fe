"""
Dependency injection container for FastAPI.
Provides singleton-like behavior for services and repositories.
"""
from functools import lru_cache
from src.core import config
from src.repositories.access_repository import AccessRepository
from src.repositories.dynamo_access_repository import DynamoAccessRepository
from src.repositories.supabase_access_repository import SupabaseAccessRepository
from src.services.generator_service import GeneratorService
from src.services.inflight import InFlightRegistry
from src.services.normalizer_service import NormalizerService
from src.services.resolution_service import ResolutionService


@lru_cache()
def get_access_repository() -> AccessRepository:
    """Get the configured cache store repository singleton."""
    backend = config.settings.cache_backend.lower()
    if backend == "supabase":
        return SupabaseAccessRepository()
    if backend == "dynamodb":
        return DynamoAccessRepository()
    raise ValueError(f"Unsupported cache backend: {config.settings.cache_backend}")


@lru_cache()
def get_generator_service() -> GeneratorService:
    """Get GeneratorService singleton instance."""
    return GeneratorService()


@lru_cache()
def get_inflight_registry() -> InFlightRegistry:
    """Get the process-wide in-flight registry."""
    return InFlightRegistry()


@lru_cache()
def get_resolution_service() -> ResolutionService:
    """Get ResolutionService singleton instance with injected dependencies."""
    return ResolutionService(
        repository=get_access_repository(),
        generator=get_generator_service(),
        normalizer=NormalizerService(),
        inflight=get_inflight_registry()
    )
