"""
Checkout upsell block.

Keeps the per-page UI state (loading, selections, in-flight adds, error banner)
and turns it into a JSON view model.
"""

from .controller import UpsellWidget
from .state import AddState, ErrorBanner, WidgetPhase, WidgetState

__all__ = ["UpsellWidget", "AddState", "ErrorBanner", "WidgetPhase", "WidgetState"]
