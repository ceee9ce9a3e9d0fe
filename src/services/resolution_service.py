"""
Resolution Service for business logic.
Orchestrates cache lookup, generation, normalization and persistence for a substance.
"""
import logging
from typing import Callable, Optional, TypeVar
from src.core import config
from src.core.exceptions import (
    InvalidInputException,
    SubstanceNotFoundException,
    StoreUnavailableException,
    GeneratorUnavailableException
)
from src.core.retry import call_with_retries
from src.models.access_status import resolve_display_status
from src.models.country_codes import COUNTRY_CODES
from src.models.dto.substance_dto import (
    MAX_SUBSTANCE_LENGTH,
    SearchSubstanceResponse,
    SubstanceDatasetResponse,
    CountryAccessResponse
)
from src.repositories.access_repository import AccessRepository
from src.services.generator_service import GeneratorService
from src.services.inflight import InFlightRegistry
from src.services.normalizer_service import NormalizerService

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Failures worth another attempt when retries are enabled
TRANSIENT_ERRORS = (StoreUnavailableException, GeneratorUnavailableException)


class ResolutionService:
    """Service resolving substances to per-country access datasets."""

    def __init__(
        self,
        repository: AccessRepository,
        generator: GeneratorService,
        normalizer: NormalizerService = None,
        inflight: InFlightRegistry = None
    ):
        self.repository = repository
        self.generator = generator
        self.normalizer = normalizer or NormalizerService()
        self.inflight = inflight or InFlightRegistry()

    def resolve(self, substance: Optional[str]) -> SearchSubstanceResponse:
        """
        Resolve a substance, generating and caching its dataset on a miss.

        Concurrent calls for the same trimmed substance share one run.

        Args:
            substance: Substance name as submitted

        Returns:
            SearchSubstanceResponse with source and row count

        Raises:
            InvalidInputException: If substance is missing or blank
            StoreUnavailableException: If the cache store fails
            GeneratorException: If generation fails
            NoValidRowsException: If generation yields no valid rows
        """
        normalized = self._validate_substance(substance)
        return self.inflight.run(normalized, lambda: self._resolve(normalized))

    def get_dataset(self, substance: Optional[str]) -> SubstanceDatasetResponse:
        """
        Read the stored dataset for a substance without generating.

        Raises:
            InvalidInputException: If substance is missing or blank
            SubstanceNotFoundException: If the substance is not cached
            StoreUnavailableException: If the cache store fails
        """
        normalized = self._validate_substance(substance)
        records = self._call("lookup", self.repository.lookup, normalized)
        if not records:
            raise SubstanceNotFoundException(f"Substance '{normalized}' not found")

        countries = {
            record.country_code: CountryAccessResponse(
                access_status=record.access_status,
                display_status=resolve_display_status(record.access_status).value,
                reference_link=record.reference_link,
                updated_at=record.updated_at
            )
            for record in records
        }
        return SubstanceDatasetResponse(substance=normalized, countries=countries, count=len(countries))

    def _resolve(self, substance: str) -> SearchSubstanceResponse:
        existing = self._call("lookup", self.repository.lookup, substance)
        if existing:
            logger.info("%s already cached (%d rows)", substance, len(existing))
            return SearchSubstanceResponse(source="cache", rows=len(existing))

        logger.info("Cache miss for %s, generating %d countries", substance, len(COUNTRY_CODES))
        raw_mapping = self._call("generate", self.generator.generate, substance, list(COUNTRY_CODES))

        records = self.normalizer.normalize(raw_mapping, substance)

        self._call("upsert", self.repository.upsert, records)
        logger.info("Inserted %d rows for %s", len(records), substance)
        return SearchSubstanceResponse(source="generated", rows=len(records))

    def _call(self, label: str, fn: Callable[..., T], *args) -> T:
        settings = config.settings
        return call_with_retries(
            lambda: fn(*args),
            max_attempts=settings.retry_max_attempts,
            base_delay=settings.retry_base_delay_seconds,
            max_delay=settings.retry_max_delay_seconds,
            retry_on=TRANSIENT_ERRORS,
            label=label
        )

    def _validate_substance(self, substance: Optional[str]) -> str:
        normalized = (substance or "").strip()
        if not normalized:
            raise InvalidInputException("Missing substance")
        if len(normalized) > MAX_SUBSTANCE_LENGTH:
            raise InvalidInputException(
                "Substance too long",
                details=f"At most {MAX_SUBSTANCE_LENGTH} characters"
            )
        return normalized
