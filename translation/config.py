"""
Translation Configuration

Module-specific settings for the translation proxy.
"""
import os

# =========================
# Upstream Configuration
# =========================

# LibreTranslate-compatible endpoint
TRANSLATION_UPSTREAM_URL = os.getenv(
    "TRANSLATION_UPSTREAM_URL", "https://translate.argosopentech.com/translate"
)

# Fixed request fields sent upstream
TRANSLATION_SOURCE_LANGUAGE = os.getenv("TRANSLATION_SOURCE_LANGUAGE", "auto")
TRANSLATION_FORMAT = os.getenv("TRANSLATION_FORMAT", "text")

# =========================
# Retry Policy
# =========================

# Hard timeout per attempt, in milliseconds
TRANSLATION_TIMEOUT_MS = int(os.getenv("TRANSLATION_TIMEOUT_MS", "10000"))

# Attempt budget shared by 5xx responses and network errors
TRANSLATION_MAX_ATTEMPTS = int(os.getenv("TRANSLATION_MAX_ATTEMPTS", "2"))

# Wait before attempt n+1 is TRANSLATION_RETRY_BACKOFF_MS * n
TRANSLATION_RETRY_BACKOFF_MS = int(os.getenv("TRANSLATION_RETRY_BACKOFF_MS", "300"))

# =========================
# Input Limits
# =========================

TRANSLATION_MAX_TEXT_LENGTH = int(os.getenv("TRANSLATION_MAX_TEXT_LENGTH", "20000"))
TRANSLATION_DEFAULT_TARGET_LANGUAGE = os.getenv("TRANSLATION_DEFAULT_TARGET_LANGUAGE", "en")

# =========================
# Connection Settings
# =========================

TRANSLATION_CONNECTION_POOL_LIMIT = int(os.getenv("TRANSLATION_CONNECTION_POOL_LIMIT", "10"))
