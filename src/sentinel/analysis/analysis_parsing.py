"""Utilities for parsing classification responses into AnalysisResult objects."""

from __future__ import annotations

import json
from typing import Any

import jsonschema
from jsonschema import ValidationError

from sentinel.analysis.analysis_schema import ANALYSIS_SCHEMA
from sentinel.datatypes.analysis_datatypes import AnalysisResult
from sentinel.util.logger import get_logger

logger = get_logger("analysis_parsing")


def _extract_json_payload(raw: str) -> Any:
    """Extract JSON object from raw text using json.loads()."""
    text = raw.strip()
    # Some OpenAI-compatible servers wrap structured output in a markdown fence
    if text.startswith("```"):
        text = text.strip("`").strip()
        if text.lower().startswith("json"):
            text = text[4:]
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("[EXTRACT] Parsing failed: %s", exc)
        raise ValueError("Failed to extract JSON payload") from exc


def parse_analysis(response: str | None, expected_schema: dict | None = None) -> AnalysisResult | None:
    """Parse a classification response into an AnalysisResult.

    Args:
        response: Model response text containing JSON.
        expected_schema: JSON schema used for validation (defaults to ANALYSIS_SCHEMA).

    Returns:
        The normalized AnalysisResult, or None when the response is empty,
        not JSON, or does not satisfy the schema.
    """
    if not response or not response.strip():
        logger.error("[PARSE] Empty response from model")
        return None

    logger.debug("[PARSE] Parsing analysis response (%d chars)", len(response))
    try:
        payload = _extract_json_payload(response)
    except ValueError as exc:
        logger.error("[PARSE] Failed to extract JSON: %s", exc)
        return None

    if not isinstance(payload, dict):
        logger.error("[PARSE] Payload is not a dict, got %s", type(payload).__name__)
        return None

    try:
        jsonschema.validate(instance=payload, schema=expected_schema or ANALYSIS_SCHEMA)
    except ValidationError as exc:
        logger.error("[PARSE] Schema validation failed: %s", exc.message)
        return None

    return AnalysisResult.from_payload(payload)
