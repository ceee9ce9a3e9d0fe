"""
AWS Systems Manager Parameter Store helper.
Fetches secrets with caching and falls back to environment variables for local dev.
"""
import logging
import os
import boto3
from functools import lru_cache

logger = logging.getLogger(__name__)


@lru_cache(maxsize=10)
def get_parameter(parameter_name: str, region: str = "us-east-1") -> str:
    """
    Fetch parameter from Parameter Store with caching.

    Args:
        parameter_name: Full parameter name (e.g., /substance-access-api/dev/openai-api-key)
        region: AWS region

    Returns:
        Parameter value (decrypted if SecureString)
    """
    ssm = boto3.client('ssm', region_name=region)
    response = ssm.get_parameter(Name=parameter_name, WithDecryption=True)
    return response['Parameter']['Value']


def get_secret(parameter_name: str, env_var: str, settings) -> str:
    """
    Resolve a credential, preferring Parameter Store over the environment.

    Args:
        parameter_name: Parameter Store name holding the secret
        env_var: Environment variable used when the parameter is unavailable
        settings: Settings instance (region and parameter store toggle)

    Returns:
        Secret value, or an empty string when neither source has it
    """
    if settings.use_parameter_store:
        try:
            return get_parameter(parameter_name, settings.aws_region)
        except Exception as e:
            # Never log the value, only where it came from
            logger.warning("Parameter %s unavailable, using %s from environment: %s", parameter_name, env_var, e)
    return os.getenv(env_var, "")
