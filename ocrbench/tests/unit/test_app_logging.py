"""
Unit tests for settings normalization and the JSON log formatter.
"""
import json
import logging

from ocrbench.app_logging import JsonFormatter
from ocrbench.config import Settings


def test_endpoint_gets_trailing_slash():
    settings = Settings(AZURE_OPENAI_ENDPOINT=" https://example.openai.azure.com ")
    assert settings.ensure_endpoint() == "https://example.openai.azure.com/"
    assert Settings(AZURE_OPENAI_ENDPOINT="").ensure_endpoint() == ""


def test_json_formatter_keeps_scalar_extras():
    record = logging.LogRecord("ocrbench.test", logging.WARNING, __file__, 1, "retry %s", (2,), None)
    record.attempt = 2
    record.payload = {"skipped": True}

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "WARNING"
    assert payload["logger"] == "ocrbench.test"
    assert payload["message"] == "retry 2"
    assert payload["attempt"] == 2
    assert "payload" not in payload
