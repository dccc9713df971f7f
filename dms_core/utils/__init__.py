"""
Utility functions - Pure functions with no I/O.
These can be used across all layers.
"""
from .document_utils import (
    format_bytes,
    generate_file_id,
    mime_type_from_extension,
    sanitize_file_name,
)

__all__ = [
    "format_bytes",
    "generate_file_id",
    "mime_type_from_extension",
    "sanitize_file_name",
]
