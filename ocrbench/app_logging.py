from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from .config import get_settings

_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
  def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
    payload: dict[str, Any] = {
      "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
      "level": record.levelname,
      "logger": record.name,
      "message": record.getMessage(),
    }
    if record.exc_info:
      payload["exc_info"] = self.formatException(record.exc_info)
    for key, value in record.__dict__.items():
      if key.startswith("_") or key in _RESERVED_ATTRS or key in payload:
        continue
      if isinstance(value, (str, int, float, bool)) or value is None:
        payload[key] = value
    return json.dumps(payload, ensure_ascii=False)


def configure_logging(structured: bool | None = None) -> None:
  settings = get_settings()
  if structured is None:
    structured = settings.structured_logging

  root = logging.getLogger()
  for handler in list(root.handlers):  # reset existing handlers
    root.removeHandler(handler)

  root.setLevel(settings.log_level.upper())
  stream_handler = logging.StreamHandler(sys.stdout)
  if structured:
    stream_handler.setFormatter(JsonFormatter())
  else:
    stream_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
  root.addHandler(stream_handler)

  # Reduce noisy third-party loggers if present.
  logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
  logging.getLogger("openai").setLevel(logging.INFO)
  logging.getLogger("httpx").setLevel(logging.WARNING)
  logging.getLogger("azure.identity").setLevel(logging.WARNING)
