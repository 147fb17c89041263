"""Shared utilities: datetime and ID generators."""

from app.shared.utils.datetime import ensure_utc, utc_now
from app.shared.utils.generators import generate_cuid, generate_request_id

__all__ = [
    "generate_cuid",
    "generate_request_id",
    "utc_now",
    "ensure_utc",
]
