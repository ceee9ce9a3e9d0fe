"""
Generator Service.
Asks an OpenAI chat model for the access status of a substance in every
requested country and parses the reply into a flat mapping.
"""
import json
import logging
from typing import Dict, Optional, Sequence
from openai import OpenAI, OpenAIError
from src.core import config
from src.core.exceptions import (
    GeneratorEmptyResponseException,
    GeneratorMalformedOutputException,
    GeneratorUnavailableException
)
from src.models.access_status import AccessStatus

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a precise legal/medical data provider. Always output valid JSON only."


def build_prompt(substance: str, country_codes: Sequence[str]) -> str:
    """Build the user prompt for one substance and an ordered list of codes."""
    labels = "\n".join(f'- "{label}"' for label in AccessStatus.labels())
    return (
        f'For the substance "{substance}", determine its current legal or medical access status '
        f"in the following countries:\n"
        f"{', '.join(country_codes)}\n\n"
        f"Respond ONLY in strict JSON as an object where keys are exactly the ISO 3166-1 alpha-2 codes "
        f"listed above and values are one of:\n"
        f"{labels}"
    )


def strip_code_fence(raw: str) -> str:
    """Remove a surrounding ```json ... ``` fence if present."""
    text = raw.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def parse_flat_mapping(raw: str) -> Dict[str, str]:
    """
    Parse generator content into a flat string-to-string mapping.

    Args:
        raw: Raw message content

    Returns:
        Parsed mapping

    Raises:
        GeneratorMalformedOutputException: If content is not a JSON object of strings
    """
    try:
        parsed = json.loads(strip_code_fence(raw))
    except json.JSONDecodeError as e:
        raise GeneratorMalformedOutputException(
            "Failed to parse generator output",
            details=f"Invalid JSON: {e.msg}"
        ) from e

    if not isinstance(parsed, dict):
        raise GeneratorMalformedOutputException(
            "Failed to parse generator output",
            details=f"Expected a JSON object, got {type(parsed).__name__}"
        )

    for key, value in parsed.items():
        if not isinstance(value, str):
            raise GeneratorMalformedOutputException(
                "Failed to parse generator output",
                details=f"Value for '{key}' is {type(value).__name__}, expected string"
            )

    return parsed


class GeneratorService:
    """Service wrapping a single zero-temperature chat completion."""

    def __init__(self, client: Optional[OpenAI] = None, model: Optional[str] = None):
        self.model = model or config.settings.generator_model
        # max_retries=0: one attempt per resolution
        self.client = client or OpenAI(
            api_key=config.settings.openai_api_key,
            timeout=config.settings.generator_timeout_seconds,
            max_retries=0
        )

    def generate(self, substance: str, country_codes: Sequence[str]) -> Dict[str, str]:
        """
        Classify a substance in every supplied country.

        Args:
            substance: Trimmed substance name
            country_codes: Ordered country codes to ask about

        Returns:
            Mapping of country code to status label, unvalidated

        Raises:
            GeneratorUnavailableException: If the API call fails
            GeneratorEmptyResponseException: If the reply has no content
            GeneratorMalformedOutputException: If the reply is not a flat JSON object
        """
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(substance, country_codes)},
                ],
                temperature=0,
            )
        except OpenAIError as e:
            raise GeneratorUnavailableException(
                "Generator request failed",
                details=type(e).__name__
            ) from e

        content = None
        if completion.choices:
            content = completion.choices[0].message.content
        raw = (content or "").strip()
        if not raw:
            raise GeneratorEmptyResponseException("Empty response from generator")

        try:
            return parse_flat_mapping(raw)
        except GeneratorMalformedOutputException:
            logger.error("Failed to parse generator output for %s: %s", substance, raw)
            raise
