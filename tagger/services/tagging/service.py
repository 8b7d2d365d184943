"""The tagging service.

Owns every read and write of :class:`~tagger.core.models.tag.Tag` records.
Taggable objects are designated either by an explicit kind and id
(`*_by_type_and_id` methods) or by the object itself (`*_by_object`).

Each write comes in two flavours:

* soft methods return `True` on success and `False` when there is nothing to
  do (tag already there, tag not found);
* strict methods (`*_strict`) raise :exc:`DuplicateTag` or
  :exc:`TagNotFound` instead of returning `False`.

Cached associations: the `tags` relationship of a :class:`Taggable` instance
is loaded once and kept. Writes made through `*_by_object` methods and
:meth:`TaggingService.update_tags_from_list` invalidate it; writes made
through `*_by_type_and_id` methods can't, because they don't know the
instance. Callers holding one must call :meth:`TaggingService.invalidate`.
"""
from typing import Any, List, NamedTuple, Optional, Tuple, Union

import sqlalchemy as sa
import sqlalchemy.exc
from flask import current_app
from flask_sqlalchemy.query import Query

from tagger.core import signals
from tagger.core.extensions import db
from tagger.core.models.tag import Tag, Taggable, TaggableRef, \
    class_for_kind, kind_of
from tagger.services.base import Service


class TaggingError(Exception):
    """Base class for tagging errors."""

    def __init__(self, ref: TaggableRef, label: str) -> None:
        super().__init__(ref, label)
        self.ref = ref
        self.label = label


class DuplicateTag(TaggingError):
    def __str__(self):
        return f"{self.ref} is already tagged with {self.label!r}"


class TagNotFound(TaggingError):
    def __str__(self):
        return f"{self.ref} is not tagged with {self.label!r}"


class TagDiff(NamedTuple):
    """Labels added and removed by
    :meth:`TaggingService.update_tags_from_list`."""

    added: Tuple[str, ...]
    removed: Tuple[str, ...]


class TaggingService(Service):
    """The tag service."""

    name = "tagging"

    def normalize_label(self, label: str) -> str:
        """Hook applied on every label entering the service.

        Labels are stored as given.
        """
        return label

    #
    # Tag records, by kind and id
    #
    def add_by_type_and_id(self, kind: str, taggable_id: int, label: str) -> bool:
        """Tag object `kind:taggable_id` with `label`.

        :returns: `True` if the tag has been created, `False` if the object was
            already tagged with `label`.
        """
        ref = TaggableRef.of(kind, taggable_id)
        label = self._label(label)

        if self._find(ref, label) is not None:
            self.logger.info("%s already tagged with %r", ref, label)
            return False

        try:
            self._create(ref, label)
        except DuplicateTag:
            self.logger.info("%s concurrently tagged with %r", ref, label)
            return False

        self.logger.debug("Tagged %s with %r", ref, label)
        signals.tag_added.send(self, ref=ref, label=label)
        return True

    def add_by_type_and_id_strict(
        self, kind: str, taggable_id: int, label: str
    ) -> None:
        """Like :meth:`add_by_type_and_id`.

        :raise DuplicateTag: if the object is already tagged with `label`.
        """
        if not self.add_by_type_and_id(kind, taggable_id, label):
            ref = TaggableRef.of(kind, taggable_id)
            raise DuplicateTag(ref, self.normalize_label(label))

    def remove_by_type_and_id(self, kind: str, taggable_id: int, label: str) -> bool:
        """Remove tag `label` from object `kind:taggable_id`.

        :returns: `True` if the tag has been deleted, `False` if it wasn't
            found or if the storage reported a failed delete.
        """
        ref = TaggableRef.of(kind, taggable_id)
        label = self._label(label)

        tag = self._find(ref, label)
        if tag is None:
            self.logger.info("%s is not tagged with %r", ref, label)
            return False

        if not self._destroy(tag):
            self.logger.warning("Failed to delete tag %r from %s", label, ref)
            return False

        self.logger.debug("Removed tag %r from %s", label, ref)
        signals.tag_removed.send(self, ref=ref, label=label)
        return True

    def remove_by_type_and_id_strict(
        self, kind: str, taggable_id: int, label: str
    ) -> None:
        """Like :meth:`remove_by_type_and_id`.

        :raise TagNotFound: if the tag couldn't be removed.
        """
        if not self.remove_by_type_and_id(kind, taggable_id, label):
            ref = TaggableRef.of(kind, taggable_id)
            raise TagNotFound(ref, self.normalize_label(label))

    #
    # Tag records, by object
    #
    def add_by_object(self, obj: Any, label: str) -> bool:
        ref = TaggableRef.for_object(obj)
        try:
            return self.add_by_type_and_id(ref.kind, ref.id, label)
        finally:
            self.invalidate(obj)

    def add_by_object_strict(self, obj: Any, label: str) -> None:
        ref = TaggableRef.for_object(obj)
        try:
            self.add_by_type_and_id_strict(ref.kind, ref.id, label)
        finally:
            self.invalidate(obj)

    def remove_by_object(self, obj: Any, label: str) -> bool:
        ref = TaggableRef.for_object(obj)
        try:
            return self.remove_by_type_and_id(ref.kind, ref.id, label)
        finally:
            self.invalidate(obj)

    def remove_by_object_strict(self, obj: Any, label: str) -> None:
        ref = TaggableRef.for_object(obj)
        try:
            self.remove_by_type_and_id_strict(ref.kind, ref.id, label)
        finally:
            self.invalidate(obj)

    #
    # Lists
    #
    def get_tags_applied_on(self, obj_or_ref: Union[Any, TaggableRef]) -> List[str]:
        """Returns the labels of the tags applied on a given object, read from
        storage."""
        ref = self._ref(obj_or_ref)
        query = (
            db.session.query(Tag.label)
            .filter(Tag.taggable_type == ref.kind, Tag.taggable_id == ref.id)
            .order_by(Tag.id)
        )
        return [label for (label,) in query]

    def update_tags_from_list(
        self, obj: Any, new_list: str, delimiter: Optional[str] = None
    ) -> TagDiff:
        """Add and remove tags on `obj` so that they match `new_list`.

        `new_list` is a string of labels separated by `delimiter` (defaults to
        config `TAGGING_DELIMITER`). Duplicate and empty labels are ignored.
        All removals are made before additions, and nothing is rolled back if
        one of them fails.
        """
        if delimiter is None:
            delimiter = current_app.config["TAGGING_DELIMITER"]

        ref = TaggableRef.for_object(obj)
        old_labels = set(self.get_tags_applied_on(ref))
        new_labels = {
            self.normalize_label(label)
            for label in new_list.split(delimiter)
            if label
        }

        to_remove = tuple(sorted(old_labels - new_labels))
        to_add = tuple(sorted(new_labels - old_labels))

        try:
            for label in to_remove:
                self.remove_by_type_and_id_strict(ref.kind, ref.id, label)

            for label in to_add:
                self.add_by_type_and_id_strict(ref.kind, ref.id, label)
        finally:
            # otherwise the previous tags stay in obj.tags
            self.invalidate(obj)

        return TagDiff(added=to_add, removed=to_remove)

    def get_objects_tagged_with(self, cls_or_kind: Union[type, str], label: str) -> Query:
        """Returns a query of the objects of a given class (or kind) tagged
        with `label`."""
        if isinstance(cls_or_kind, str):
            kind = cls_or_kind
            cls = class_for_kind(kind)
        else:
            cls = cls_or_kind
            kind = kind_of(cls)

        label = self.normalize_label(label)
        tagged_ids = (
            sa.select(Tag.taggable_id)
            .where(Tag.taggable_type == kind, Tag.label == label)
            .distinct()
        )
        return cls.query.filter(cls.id.in_(tagged_ids))

    def all_labels(self, kind: Optional[str] = None) -> List[str]:
        """Returns all labels in use, sorted, optionally only those applied on
        objects of `kind`."""
        query = db.session.query(Tag.label).distinct()
        if kind is not None:
            class_for_kind(kind)
            query = query.filter(Tag.taggable_type == kind)
        return [label for (label,) in query.order_by(Tag.label)]

    def invalidate(self, obj: Any) -> None:
        """Forget the tags loaded on `obj`, so that they are read from storage
        next time."""
        if not isinstance(obj, Taggable):
            return

        state = sa.inspect(obj)
        if state.session is not None and state.has_identity:
            state.session.expire(obj, ["tags"])

    #
    # Storage
    #
    def _ref(self, obj_or_ref: Union[Any, TaggableRef]) -> TaggableRef:
        if isinstance(obj_or_ref, TaggableRef):
            return TaggableRef.of(*obj_or_ref)
        return TaggableRef.for_object(obj_or_ref)

    def _label(self, label: str) -> str:
        label = self.normalize_label(label)
        if not isinstance(label, str) or not label:
            raise ValueError(f"Tag label must be a non-empty string, got {label!r}")
        return label

    def _find(self, ref: TaggableRef, label: str) -> Optional[Tag]:
        return Tag.query.filter(
            Tag.taggable_type == ref.kind,
            Tag.taggable_id == ref.id,
            Tag.label == label,
        ).first()

    def _create(self, ref: TaggableRef, label: str) -> Tag:
        """Insert a tag in a savepoint.

        :raise DuplicateTag: if the unique constraint rejected it.
        """
        tag = Tag(label=label, taggable_type=ref.kind, taggable_id=ref.id)
        session = db.session()
        try:
            with session.begin_nested():
                session.add(tag)
        except sa.exc.IntegrityError as e:
            if self._find(ref, label) is None:
                raise
            raise DuplicateTag(ref, label) from e
        return tag

    def _destroy(self, tag: Tag) -> bool:
        """Delete `tag`; returns `True` if storage reports it deleted."""
        result = db.session.execute(sa.delete(Tag).where(Tag.id == tag.id))
        return result.rowcount == 1


tagging_service = TaggingService()
