"""
DynamoDB Repository for substance access records.
One item per (substance, country_code); put_item on the same key replaces the row.
"""
import logging
from datetime import datetime
from typing import List, Sequence
import boto3
from botocore.config import Config
from botocore.exceptions import ClientError
from src.core import config
from src.core.exceptions import StoreRejectedException, StoreUnavailableException
from src.models.access_record import AccessRecord
from src.repositories.access_repository import AccessRepository

logger = logging.getLogger(__name__)


class DynamoAccessRepository(AccessRepository):
    """Repository for DynamoDB operations."""

    def __init__(self):
        boto_config = Config(
            connect_timeout=config.settings.store_timeout_seconds,
            read_timeout=config.settings.store_timeout_seconds,
            retries={'max_attempts': 1, 'mode': 'standard'}
        )
        self.dynamodb = boto3.resource('dynamodb', region_name=config.settings.aws_region, config=boto_config)
        self.table = self.dynamodb.Table(config.settings.access_table_name)

    def lookup(self, substance: str) -> List[AccessRecord]:
        """
        Find all country records for a substance.

        Args:
            substance: Trimmed substance name (exact match)

        Returns:
            List of AccessRecord objects, empty when not cached

        Raises:
            StoreUnavailableException: If the query fails
            StoreRejectedException: If DynamoDB rejects the key as invalid
        """
        try:
            query_kwargs = {
                'KeyConditionExpression': 'PK = :pk',
                'ExpressionAttributeValues': {':pk': self._create_pk(substance)}
            }
            items = []
            while True:
                response = self.table.query(**query_kwargs)
                items.extend(response.get('Items', []))
                if 'LastEvaluatedKey' not in response:
                    break
                query_kwargs['ExclusiveStartKey'] = response['LastEvaluatedKey']

            return [self._item_to_record(item) for item in items]

        except ClientError as e:
            raise self._client_error("Failed to query cache store", e) from e
        except Exception as e:
            raise StoreUnavailableException(
                "Failed to query cache store",
                details=f"Unexpected error querying access records: {type(e).__name__}"
            ) from e

    def upsert(self, records: Sequence[AccessRecord]) -> int:
        """
        Save records in batches, replacing rows with the same key.
        DynamoDB batch_writer handles batching (25 items per batch) and
        drops duplicate keys within the buffer.

        Args:
            records: AccessRecord objects to write

        Returns:
            Number of distinct keys written

        Raises:
            StoreUnavailableException: If the batch write fails
            StoreRejectedException: If DynamoDB rejects an item as invalid
        """
        try:
            with self.table.batch_writer(overwrite_by_pkeys=['PK', 'SK']) as batch:
                for record in records:
                    batch.put_item(Item=self._record_to_item(record))
            return len({record.key for record in records})
        except ClientError as e:
            raise self._client_error("Cache store write failed", e) from e
        except Exception as e:
            raise StoreUnavailableException(
                "Cache store write failed",
                details=f"Unexpected error during batch write: {type(e).__name__}"
            ) from e

    def _create_pk(self, substance: str) -> str:
        """Create partition key for substance."""
        return f"SUBSTANCE#{substance}"

    def _create_sk(self, country_code: str) -> str:
        """Create sort key for country."""
        return f"COUNTRY#{country_code}"

    def _record_to_item(self, record: AccessRecord) -> dict:
        item = {
            'PK': self._create_pk(record.substance),
            'SK': self._create_sk(record.country_code),
            'substance': record.substance,
            'country_code': record.country_code,
            'access_status': record.access_status,
            'updated_at': record.updated_at.isoformat()
        }
        if record.reference_link:
            item['reference_link'] = record.reference_link
        return item

    def _item_to_record(self, item: dict) -> AccessRecord:
        """Convert DynamoDB item to AccessRecord domain model."""
        return AccessRecord(
            substance=item['substance'],
            country_code=item['country_code'],
            access_status=item['access_status'],
            updated_at=datetime.fromisoformat(item['updated_at']),
            reference_link=item.get('reference_link')
        )

    def _status_details(self, error: ClientError) -> str:
        status = error.response.get('ResponseMetadata', {}).get('HTTPStatusCode')
        code = error.response.get('Error', {}).get('Code', 'Unknown')
        return f"HTTP {status} ({code})"

    def _client_error(self, message: str, error: ClientError) -> Exception:
        details = self._status_details(error)
        if error.response.get('Error', {}).get('Code') == 'ValidationException':
            logger.warning("DynamoDB rejected request: %s", details)
            return StoreRejectedException(message, details=details)
        return StoreUnavailableException(message, details=details)
