"""
Security Utilities
==================

Keeps credentials out of logs and user-visible error messages.
"""

import re
import logging

logger = logging.getLogger(__name__)


def redact_api_key(text: str) -> str:
    """
    Redact API keys and sensitive tokens from text.

    Args:
        text: Text that might contain API keys

    Returns:
        Text with API keys redacted
    """
    if not text:
        return text

    patterns = [
        # Generic Bearer tokens
        (r"Bearer\s+[A-Za-z0-9_\-\.]+", "Bearer ***REDACTED***"),
        # Google API keys
        (r"AIza[A-Za-z0-9_\-]{35}", "AIza***REDACTED***"),
        # Query string keys (?key=... / &key=...)
        (r"([?&]key=)[^&\s\"']+", r"\1***REDACTED***"),
        # Generic API key patterns
        (r"api[_-]?key['\"]?\s*[:=]\s*['\"]?[A-Za-z0-9_\-]+", "api_key: ***REDACTED***"),
        # Environment variable patterns
        (r"(GOOGLE_API_KEY|GEMINI_API_KEY)=[^\s]+", r"\1=***REDACTED***"),
    ]

    result = text
    for pattern, replacement in patterns:
        result = re.sub(pattern, replacement, result, flags=re.IGNORECASE)

    return result
