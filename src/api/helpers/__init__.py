"""API helper utilities."""
from api.helpers.note_lookup import get_note_or_404

__all__ = ["get_note_or_404"]
