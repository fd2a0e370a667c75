import hashlib
import json
import logging
import re
import sys
import time
from typing import Any, Dict, Optional

from .config import get_settings


SENSITIVE_HEADERS = ("authorization", "proxy-authorization", "cookie", "set-cookie", "x-api-key", "x-auth-token")


class JsonFormatter(logging.Formatter):
    """JSON formatter that redacts credentials carried in interaction headers."""

    def __init__(self, service: Optional[str] = None):
        super().__init__()
        self.service = service
        self.redaction_patterns = [
            # Header values in rendered interactions, e.g. "Authorization": "Bearer abc"
            (re.compile(r'(?i)"(?:%s)"\s*:\s*"([^"]+)"' % "|".join(SENSITIVE_HEADERS)), 'header'),
            # Bearer and basic credentials anywhere in free text
            (re.compile(r'(?i)\b(?:bearer|basic)\s+([A-Za-z0-9\-._~+/]+=*)'), 'credential'),
        ]

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": self._redact_sensitive_data(record.getMessage()),
        }
        if self.service:
            payload["service"] = self.service

        for key, value in getattr(record, "extra", {}).items():
            if isinstance(value, str):
                payload[key] = self._redact_sensitive_data(value)
            elif isinstance(value, dict):
                payload[key] = self._redact_dict(value)
            else:
                payload[key] = value

        if record.exc_info:
            exc_text = self.formatException(record.exc_info)
            payload["exc_info"] = self._redact_sensitive_data(exc_text)

        return json.dumps(payload, ensure_ascii=False, default=str)

    def _redact_sensitive_data(self, text: str) -> str:
        """Redact credentials from text."""
        if not isinstance(text, str):
            return text

        redacted_text = text
        for pattern, field_type in self.redaction_patterns:
            for identifier in pattern.findall(redacted_text):
                if identifier:
                    redacted_text = redacted_text.replace(identifier, _redacted(identifier, field_type))

        return redacted_text

    def _redact_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively redact sensitive header values from dictionary structures."""
        redacted_dict = {}

        for key, value in data.items():
            if isinstance(key, str) and key.lower() in SENSITIVE_HEADERS:
                redacted_dict[key] = _redacted(str(value)) if value else "[REDACTED]"
            elif isinstance(value, str):
                redacted_dict[key] = self._redact_sensitive_data(value)
            elif isinstance(value, dict):
                redacted_dict[key] = self._redact_dict(value)
            elif isinstance(value, list):
                redacted_dict[key] = [
                    self._redact_dict(item) if isinstance(item, dict)
                    else self._redact_sensitive_data(item) if isinstance(item, str)
                    else item
                    for item in value
                ]
            else:
                redacted_dict[key] = value

        return redacted_dict


def _redacted(value: str, field_type: str = "") -> str:
    digest = hashlib.md5(value.encode()).hexdigest()[:8]
    if field_type:
        return f"[REDACTED_{field_type.upper()}_{digest}]"
    return f"[REDACTED_{digest}]"


def setup_logging() -> None:
    settings = get_settings()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter(service=settings.SERVICE_NAME))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
