"""
Integration tests for API endpoints.
Tests the full request/response cycle including routes, dependencies, and exception handlers.
"""
from types import SimpleNamespace
from unittest.mock import Mock
import pytest
import boto3
from fastapi.testclient import TestClient
from moto import mock_aws
from src.models.country_codes import COUNTRY_CODES
from src.repositories.dynamo_access_repository import DynamoAccessRepository
from src.services.generator_service import GeneratorService
from src.services.inflight import InFlightRegistry
from src.services.normalizer_service import NormalizerService
from src.services.resolution_service import ResolutionService


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestAPIIntegration:
    """Integration test suite for API endpoints."""

    @pytest.fixture(autouse=True)
    def setup(self, aws_env):
        """Setup test environment and reset dependency caches."""
        from src.core import dependencies
        dependencies.get_access_repository.cache_clear()
        dependencies.get_generator_service.cache_clear()
        dependencies.get_inflight_registry.cache_clear()
        dependencies.get_resolution_service.cache_clear()

        yield

        from src.main import app
        app.dependency_overrides.clear()

    def _create_table(self):
        dynamodb = boto3.resource('dynamodb', region_name='us-east-1')
        dynamodb.create_table(
            TableName='SubstanceAccess-test',
            KeySchema=[
                {'AttributeName': 'PK', 'KeyType': 'HASH'},
                {'AttributeName': 'SK', 'KeyType': 'RANGE'}
            ],
            AttributeDefinitions=[
                {'AttributeName': 'PK', 'AttributeType': 'S'},
                {'AttributeName': 'SK', 'AttributeType': 'S'}
            ],
            BillingMode='PAY_PER_REQUEST'
        )

    def _client(self, openai_client):
        """Build a TestClient whose generator talks to a mocked OpenAI client."""
        from src.main import app
        from src.core.dependencies import get_resolution_service

        service = ResolutionService(
            repository=DynamoAccessRepository(),
            generator=GeneratorService(client=openai_client, model="gpt-4o-mini"),
            normalizer=NormalizerService(clamp_unknown_status=False),
            inflight=InFlightRegistry()
        )
        app.dependency_overrides[get_resolution_service] = lambda: service
        return TestClient(app)

    @pytest.fixture
    def openai_client(self):
        client = Mock()
        payload = ", ".join(f'"{code}": "Banned"' for code in COUNTRY_CODES)
        client.chat.completions.create.return_value = _completion("{" + payload + "}")
        return client

    @mock_aws
    def test_health_check(self, openai_client):
        """Test health check endpoint."""
        client = self._client(openai_client)

        response = client.get("/v1/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "Substance Access API"
        assert data["cache_backend"] == "dynamodb"

    @mock_aws
    def test_search_generates_then_serves_from_cache(self, openai_client):
        """Test first search generates all countries and the second is a cache hit."""
        self._create_table()
        client = self._client(openai_client)

        response = client.post("/v1/api/search-substance", json={"substance": "Psilocybin"})
        assert response.status_code == 200
        assert response.json() == {"success": True, "source": "generated", "rows": 193}

        response = client.post("/v1/api/search-substance", json={"substance": "Psilocybin"})
        assert response.status_code == 200
        assert response.json() == {"success": True, "source": "cache", "rows": 193}

        assert openai_client.chat.completions.create.call_count == 1

    @mock_aws
    def test_search_trims_substance(self, openai_client):
        self._create_table()
        client = self._client(openai_client)

        client.post("/v1/api/search-substance", json={"substance": "Psilocybin"})
        response = client.post("/v1/api/search-substance", json={"substance": "  Psilocybin  "})

        assert response.json()["source"] == "cache"

    @mock_aws
    def test_search_missing_substance(self, openai_client):
        """Test empty substance returns 400 without external calls."""
        client = self._client(openai_client)

        for body in [{"substance": ""}, {"substance": "   "}, {}]:
            response = client.post("/v1/api/search-substance", json=body)
            assert response.status_code == 400
            assert response.json() == {"error": "Missing substance"}

        openai_client.chat.completions.create.assert_not_called()

    @mock_aws
    def test_search_wrong_type(self, openai_client):
        client = self._client(openai_client)

        response = client.post("/v1/api/search-substance", json={"substance": 42})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"

    @mock_aws
    def test_search_overlong_substance(self, openai_client):
        """Test an oversized substance is refused with 400 before the store or generator."""
        self._create_table()
        client = self._client(openai_client)

        response = client.post("/v1/api/search-substance", json={"substance": "x" * 5000})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"
        openai_client.chat.completions.create.assert_not_called()

    @mock_aws
    def test_get_dataset_overlong_substance(self, openai_client):
        self._create_table()
        client = self._client(openai_client)

        response = client.get("/v1/api/substances/" + "x" * 5000)

        assert response.status_code == 400
        assert response.json()["error"] == "Substance too long"

    @mock_aws
    def test_search_generator_non_json(self, openai_client):
        """Test unparseable generator output fails without writing to the store."""
        self._create_table()
        openai_client.chat.completions.create.return_value = _completion("I cannot answer that.")
        client = self._client(openai_client)

        response = client.post("/v1/api/search-substance", json={"substance": "Psilocybin"})

        assert response.status_code == 502
        data = response.json()
        assert data["error"] == "Failed to parse generator output"
        assert "I cannot answer that" not in data.get("details", "")
        assert DynamoAccessRepository().lookup("Psilocybin") == []

    @mock_aws
    def test_search_generator_empty(self, openai_client):
        self._create_table()
        openai_client.chat.completions.create.return_value = _completion("")
        client = self._client(openai_client)

        response = client.post("/v1/api/search-substance", json={"substance": "Psilocybin"})

        assert response.status_code == 502
        assert response.json() == {"error": "Empty response from generator"}

    @mock_aws
    def test_search_no_valid_rows(self, openai_client):
        self._create_table()
        openai_client.chat.completions.create.return_value = _completion('{"usa": "Banned", "XYZ": "Banned"}')
        client = self._client(openai_client)

        response = client.post("/v1/api/search-substance", json={"substance": "Psilocybin"})

        assert response.status_code == 502
        assert response.json()["error"] == "No valid rows returned"
        assert DynamoAccessRepository().lookup("Psilocybin") == []

    @mock_aws
    def test_search_store_unavailable(self, openai_client):
        """Test a store failure is surfaced with its HTTP status and no generation."""
        client = self._client(openai_client)

        response = client.post("/v1/api/search-substance", json={"substance": "Psilocybin"})

        assert response.status_code == 503
        data = response.json()
        assert data["error"] == "Failed to query cache store"
        assert data["details"].startswith("HTTP 400")
        openai_client.chat.completions.create.assert_not_called()

    @mock_aws
    def test_get_dataset(self, openai_client):
        self._create_table()
        client = self._client(openai_client)
        client.post("/v1/api/search-substance", json={"substance": "Psilocybin"})

        response = client.get("/v1/api/substances/Psilocybin")

        assert response.status_code == 200
        data = response.json()
        assert data["substance"] == "Psilocybin"
        assert data["count"] == 193
        assert data["countries"]["US"]["access_status"] == "Banned"
        assert data["countries"]["US"]["display_status"] == "Banned"

    @mock_aws
    def test_get_dataset_not_found(self, openai_client):
        self._create_table()
        client = self._client(openai_client)

        response = client.get("/v1/api/substances/Unobtainium")

        assert response.status_code == 404
        assert response.json() == {"error": "Substance 'Unobtainium' not found"}
        openai_client.chat.completions.create.assert_not_called()

    @mock_aws
    def test_statuses_and_countries(self, openai_client):
        client = self._client(openai_client)

        statuses = client.get("/v1/api/statuses").json()["statuses"]
        assert [s["status"] for s in statuses] == [
            "Approved Medical Use", "Banned", "Limited Access Trials", "Unknown"
        ]
        assert statuses[3]["color"] == "#666666"

        countries = client.get("/v1/api/countries").json()
        assert countries["count"] == 193
        assert countries["country_codes"] == list(COUNTRY_CODES)
