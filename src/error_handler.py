"""Error handling helpers for the upsell service."""
from typing import Any, Dict
import logging

logger = logging.getLogger(__name__)


class ErrorHandler:
    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
        logger.error("Unhandled exception while building offers: %s", exc, exc_info=True)
        return {
            "offers": [],
            "count": 0,
            "fallback": True,
            "metadata": {"error": str(exc), "context": context or {}},
        }
