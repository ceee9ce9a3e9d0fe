"""
Shared test fixtures and utilities.
"""
import os
import pytest
from src.models.country_codes import COUNTRY_CODES

TABLE_NAME = "SubstanceAccess-test"


@pytest.fixture
def aws_env():
    """Mock AWS credentials and table configuration for moto."""
    os.environ['AWS_ACCESS_KEY_ID'] = 'testing'
    os.environ['AWS_SECRET_ACCESS_KEY'] = 'testing'
    os.environ['AWS_SECURITY_TOKEN'] = 'testing'
    os.environ['AWS_SESSION_TOKEN'] = 'testing'
    os.environ['AWS_REGION'] = 'us-east-1'
    os.environ['ACCESS_TABLE_NAME'] = TABLE_NAME
    os.environ['CACHE_BACKEND'] = 'dynamodb'
    os.environ['USE_PARAMETER_STORE'] = 'false'
    os.environ['ENVIRONMENT'] = 'test'

    from src.core import config
    config.settings = config.Settings()

    yield

    for key in ['ACCESS_TABLE_NAME', 'CACHE_BACKEND', 'USE_PARAMETER_STORE', 'ENVIRONMENT']:
        if key in os.environ:
            del os.environ[key]
    config.settings = config.Settings()


@pytest.fixture
def full_mapping():
    """Generator output covering every registry code."""
    return {code: "Banned" for code in COUNTRY_CODES}
