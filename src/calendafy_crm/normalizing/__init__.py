"""Field and date/time normalization for outbound payloads."""

from .fields import adjust_accounts, adjust_attendees, normalize
from .temporal import resolve, resolve_range

__all__ = ["adjust_accounts", "adjust_attendees", "normalize", "resolve", "resolve_range"]
