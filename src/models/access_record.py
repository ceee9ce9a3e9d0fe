"""
Domain model for AccessRecord entity.
Store-agnostic representation of one substance/country access fact.
"""
from datetime import datetime, timezone
from typing import Optional


class AccessRecord:
    """Access status of a substance in a single country."""

    def __init__(
        self,
        substance: str,
        country_code: str,
        access_status: str,
        updated_at: Optional[datetime] = None,
        reference_link: Optional[str] = None
    ):
        self.substance = substance
        self.country_code = country_code
        self.access_status = access_status
        self.updated_at = updated_at or datetime.now(timezone.utc)
        self.reference_link = reference_link

    @property
    def key(self) -> tuple:
        """Identity of the record in the store."""
        return (self.substance, self.country_code)

    def __eq__(self, other):
        if not isinstance(other, AccessRecord):
            return NotImplemented
        return (
            self.key == other.key
            and self.access_status == other.access_status
            and self.updated_at == other.updated_at
            and self.reference_link == other.reference_link
        )

    def __repr__(self):
        return (
            f"AccessRecord(substance={self.substance}, country_code={self.country_code}, "
            f"access_status={self.access_status})"
        )
