"""
Abstract base class for the access-status cache store.
Defines the contract every store implementation honours.
"""
from abc import ABC, abstractmethod
from typing import List, Sequence
from src.models.access_record import AccessRecord


class AccessRepository(ABC):
    """Abstract repository interface for substance access records."""

    @abstractmethod
    def lookup(self, substance: str) -> List[AccessRecord]:
        """
        Find every record for a substance by exact, case-sensitive match.
        An empty list means the substance is not cached.
        """
        pass

    @abstractmethod
    def upsert(self, records: Sequence[AccessRecord]) -> int:
        """
        Write records, replacing any existing row with the same
        (substance, country_code). Returns the number of records written.
        """
        pass
