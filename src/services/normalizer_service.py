"""
Normalizer Service.
Turns a raw generator mapping into canonical AccessRecord rows.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Dict, List, Optional
from src.core import config
from src.core.exceptions import NoValidRowsException
from src.models.access_record import AccessRecord
from src.models.access_status import AccessStatus
from src.models.country_codes import is_registered

logger = logging.getLogger(__name__)

COUNTRY_CODE_PATTERN = re.compile(r"[A-Z]{2}")


class NormalizerService:
    """Validates and shapes generator output."""

    def __init__(self, clamp_unknown_status: Optional[bool] = None):
        if clamp_unknown_status is None:
            clamp_unknown_status = config.settings.clamp_unknown_status
        self.clamp_unknown_status = clamp_unknown_status

    def normalize(self, raw_mapping: Dict[str, str], substance: str) -> List[AccessRecord]:
        """
        Build one record per valid country code.

        Keys that are not two uppercase letters, or not in the country
        registry, are dropped. Status values are kept verbatim unless
        clamping is enabled.

        Args:
            raw_mapping: Country code to status label, as generated
            substance: Trimmed substance name

        Returns:
            List of AccessRecord objects sharing one timestamp

        Raises:
            NoValidRowsException: If no record survives filtering
        """
        updated_at = datetime.now(timezone.utc)
        records = []
        dropped = []

        for country_code, access_status in raw_mapping.items():
            if not COUNTRY_CODE_PATTERN.fullmatch(country_code) or not is_registered(country_code):
                dropped.append(country_code)
                continue
            records.append(AccessRecord(
                substance=substance,
                country_code=country_code,
                access_status=self._status(access_status),
                updated_at=updated_at
            ))

        if dropped:
            logger.debug("Dropped %d invalid country keys for %s: %s", len(dropped), substance, dropped)

        if not records:
            raise NoValidRowsException(
                "No valid rows returned",
                details=f"{len(raw_mapping)} keys received, none valid"
            )

        return records

    def _status(self, access_status: str) -> str:
        if self.clamp_unknown_status and not AccessStatus.is_known(access_status):
            return AccessStatus.UNKNOWN.value
        return access_status
