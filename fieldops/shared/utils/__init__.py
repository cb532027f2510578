"""Shared utilities: datetime and id generators."""

from fieldops.shared.utils.datetime import add_days, utc_now
from fieldops.shared.utils.generators import generate_cuid, generate_document_number

__all__ = [
    "generate_cuid",
    "generate_document_number",
    "utc_now",
    "add_days",
]
