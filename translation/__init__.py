"""
Translation Service Module

Proxies text translation to a LibreTranslate-compatible upstream.
"""

from .service import router, handle_translate
from .translator import close_session

__all__ = ["router", "handle_translate", "close_session"]
