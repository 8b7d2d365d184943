"""Polymorphic tagging for Flask-SQLAlchemy models."""
from .core.models.tag import Tag, TaggableRef, Taggable, register, \
    supports_tagging
from .services.tagging import DuplicateTag, TagDiff, TaggingError, \
    TagNotFound

__all__ = (
    "Tag",
    "Taggable",
    "TaggableRef",
    "register",
    "supports_tagging",
    "TagDiff",
    "TaggingError",
    "DuplicateTag",
    "TagNotFound",
)
