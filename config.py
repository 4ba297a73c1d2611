"""
Global Configuration

Shared settings used across all modules.
Module-specific settings are in each module's config.py file.

All settings can be overridden via environment variables or a .env file.
See .env.example for a complete list of configurable variables.
"""
import os
from dotenv import load_dotenv

# Load .env file before any os.getenv() calls
load_dotenv()

# =========================
# Application
# =========================

APP_NAME = os.getenv("APP_NAME", "satisfiyworld-translate")
APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
APP_PORT = int(os.getenv("APP_PORT", "8000"))

# Tag reported in every successful translation response
API_TAG = os.getenv("API_TAG", "Satisfiyworld-Translate")

# =========================
# CORS
# =========================

CORS_ALLOW_ORIGIN = os.getenv("CORS_ALLOW_ORIGIN", "*")
CORS_ALLOW_METHODS = os.getenv("CORS_ALLOW_METHODS", "GET,POST,OPTIONS")
CORS_ALLOW_HEADERS = os.getenv("CORS_ALLOW_HEADERS", "Content-Type")


# =========================
# Utility Functions
# =========================

def get_cors_headers() -> dict:
    """Headers attached to every response, including preflight and errors."""
    return {
        "Access-Control-Allow-Origin": CORS_ALLOW_ORIGIN,
        "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
        "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
    }
