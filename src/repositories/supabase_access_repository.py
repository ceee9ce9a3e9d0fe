"""
Supabase Repository for substance access records.
Talks to the PostgREST endpoint of a Supabase project using the service-role key.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
import httpx
from pydantic import TypeAdapter
from src.core import config
from src.core.exceptions import StoreUnavailableException
from src.models.access_record import AccessRecord
from src.repositories.access_repository import AccessRepository

logger = logging.getLogger(__name__)

# PostgREST trims trailing zeros from fractional seconds (e.g. .12345)
_TIMESTAMP = TypeAdapter(datetime)

# PostgREST default max-rows is 1000
PAGE_SIZE = 1000


class SupabaseAccessRepository(AccessRepository):
    """Repository for Supabase (PostgREST) operations."""

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        api_key: Optional[str] = None,
        page_size: int = PAGE_SIZE
    ):
        self.url = config.settings.supabase_url.rstrip('/')
        self.table_name = config.settings.supabase_table_name
        self.key = api_key if api_key is not None else config.settings.supabase_service_role_key
        self.client = client or httpx.Client(timeout=httpx.Timeout(config.settings.store_timeout_seconds))
        self.page_size = page_size

    @property
    def endpoint(self) -> str:
        return f"{self.url}/rest/v1/{self.table_name}"

    def lookup(self, substance: str) -> List[AccessRecord]:
        """
        Find all country records for a substance, following pages until the
        total reported in Content-Range has been read.

        Args:
            substance: Trimmed substance name (exact match)

        Returns:
            List of AccessRecord objects, empty when not cached

        Raises:
            StoreUnavailableException: If the request fails or returns non-2xx
        """
        records: List[AccessRecord] = []
        offset = 0
        while True:
            response = self._fetch_page(substance, offset)
            try:
                rows = response.json()
                records.extend(self._row_to_record(row) for row in rows)
            except (ValueError, KeyError, TypeError) as e:
                raise StoreUnavailableException(
                    "Failed to query cache store",
                    details=f"Unexpected lookup payload: {type(e).__name__}"
                ) from e

            offset += len(rows)
            total = self._total_count(response)
            if not rows:
                break
            if total is not None and offset >= total:
                break
            if total is None and len(rows) < self.page_size:
                break

        return records

    def _fetch_page(self, substance: str, offset: int) -> httpx.Response:
        headers = self._headers()
        headers["Prefer"] = "count=exact"
        params = {
            "select": "*",
            "substance": f"eq.{substance}",
            "order": "country_code",
            "limit": str(self.page_size),
            "offset": str(offset),
        }
        try:
            response = self.client.get(self.endpoint, headers=headers, params=params)
        except httpx.HTTPError as e:
            raise StoreUnavailableException(
                "Failed to query cache store",
                details=f"{type(e).__name__}"
            ) from e

        if not response.is_success:
            logger.error("Supabase lookup failed (HTTP %s): %s", response.status_code, response.text)
            raise StoreUnavailableException(
                "Failed to query cache store",
                details=f"HTTP {response.status_code}"
            )
        return response

    @staticmethod
    def _total_count(response: httpx.Response) -> Optional[int]:
        """Total from a Content-Range such as ``0-192/193``; None when the server omits it."""
        _, _, total = response.headers.get("Content-Range", "").partition("/")
        return int(total) if total.isdigit() else None

    def upsert(self, records: Sequence[AccessRecord]) -> int:
        """
        Insert records, merging on (substance, country_code) conflicts.

        Args:
            records: AccessRecord objects to write

        Returns:
            Number of distinct keys written

        Raises:
            StoreUnavailableException: If the request fails or returns non-2xx
        """
        if not records:
            return 0

        headers = self._headers()
        headers["Prefer"] = "resolution=merge-duplicates,return=minimal"
        params = {"on_conflict": "substance,country_code"}
        # Postgres rejects a batch that touches the same key twice; last one wins
        latest = {record.key: record for record in records}
        rows = [self._record_to_row(record) for record in latest.values()]

        try:
            response = self.client.post(self.endpoint, headers=headers, params=params, json=rows)
        except httpx.HTTPError as e:
            raise StoreUnavailableException(
                "Cache store write failed",
                details=f"{type(e).__name__}"
            ) from e

        if not response.is_success:
            logger.error("Supabase insert failed (HTTP %s): %s", response.status_code, response.text)
            raise StoreUnavailableException(
                "Cache store write failed",
                details=f"HTTP {response.status_code}"
            )

        return len(rows)

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.key,
            "Authorization": f"Bearer {self.key}",
            "Content-Type": "application/json",
        }

    def _record_to_row(self, record: AccessRecord) -> Dict[str, Any]:
        row = {
            "substance": record.substance,
            "country_code": record.country_code,
            "access_status": record.access_status,
            "updated_at": record.updated_at.isoformat(),
        }
        if record.reference_link:
            row["reference_link"] = record.reference_link
        return row

    def _row_to_record(self, row: Dict[str, Any]) -> AccessRecord:
        updated_at = row.get("updated_at")
        return AccessRecord(
            substance=row["substance"],
            country_code=row["country_code"],
            access_status=row["access_status"],
            updated_at=_TIMESTAMP.validate_python(updated_at) if updated_at else None,
            reference_link=row.get("reference_link")
        )
