"""
Message classification for Sentinel.

- **classifier_client.py**: Failure-absorbing client for the classification service.
- **analysis_schema.py**: Response schema and structured-output request format.
- **analysis_parsing.py**: JSON extraction and schema validation of responses.
"""
