"""JSON schema for classification responses and the matching structured-output request format."""

from openai.types.shared_params.response_format_json_schema import ResponseFormatJSONSchema

ANALYSIS_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "sentiment_score": {
            "type": "number",
            "description": "A float between -1.0 (negative) and 1.0 (positive) representing the sentiment.",
        },
        "primary_topic": {
            "type": "string",
            "description": "The main subject of the message (e.g., 'Support', 'Gaming', 'Spam', 'Random', 'Coding').",
        },
        "is_toxic": {
            "type": "boolean",
            "description": "True if the message contains hate speech, harassment, or excessive profanity.",
        },
    },
    "required": ["sentiment_score", "primary_topic", "is_toxic"],
    "additionalProperties": False,
}


def build_response_format(schema: dict | None = None) -> ResponseFormatJSONSchema:
    """Wrap the analysis schema in an OpenAI-compatible strict ``json_schema`` response format."""
    return ResponseFormatJSONSchema(
        type="json_schema",
        json_schema={
            "name": "message_analysis",
            "strict": True,
            "schema": schema or ANALYSIS_SCHEMA,
        },
    )
