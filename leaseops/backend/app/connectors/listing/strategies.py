# app/connectors/listing/strategies.py
from __future__ import annotations

from ...domain.extraction import Strategy
from .app_state import extract_app_state
from .regex_fallback import extract_regex_fallback
from .structured_data import extract_structured_data

# Priority order. Later strategies only fill fields earlier ones left unset.
PAGE_STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("structured_data", extract_structured_data),
    ("app_state", extract_app_state),
    ("regex", extract_regex_fallback),
)
