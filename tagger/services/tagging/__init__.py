"""Tagging service."""
from .service import DuplicateTag, TagDiff, TaggingError, TaggingService, \
    TagNotFound, tagging_service

__all__ = [
    "TaggingService",
    "tagging_service",
    "TagDiff",
    "TaggingError",
    "DuplicateTag",
    "TagNotFound",
]
