import abc
from typing import TYPE_CHECKING, Any, Callable, Dict, List, NamedTuple, \
    Optional

import sqlalchemy as sa
import sqlalchemy.orm
from flask_sqlalchemy.query import Query
from sqlalchemy.orm import declared_attr

from tagger.core.util import fqcn

from .base import IdMixin, Model

if TYPE_CHECKING:
    from tagger.services.tagging import TagDiff, TaggingService

#: class attribute holding the kind a taggable class is registered under
TAGGABLE_KIND_ATTR = "__taggable_kind__"

#: kind -> registered class
_registry: Dict[str, type] = {}


class SupportTagging(metaclass=abc.ABCMeta):
    pass


def register(kind: str) -> Callable[[type], type]:
    """Register a model class as a taggable kind.

    `kind` is the discriminator stored in :attr:`Tag.taggable_type` for
    instances of this class. It is explicit so that renaming or moving the
    class doesn't orphan existing tags.

    Must be used as a class decorator:

    .. code-block:: python

        @tag.register("note")
        class Note(Taggable, IdMixin, Model):
            ....
    """
    if not isinstance(kind, str) or not kind:
        raise ValueError(f"Taggable kind must be a non-empty string, got {kind!r}")

    def register_kind(cls: type) -> type:
        if not isinstance(cls, type) or not hasattr(cls, "id"):
            raise ValueError(f"{cls!r} must be a model class with an 'id' attribute")

        registered = _registry.get(kind)
        if registered is not None and registered is not cls:
            raise ValueError(
                f"Taggable kind {kind!r} is already registered by {fqcn(registered)}"
            )

        previous = cls.__dict__.get(TAGGABLE_KIND_ATTR)
        if previous is not None and previous != kind:
            raise ValueError(
                f"{fqcn(cls)} is already registered as kind {previous!r}"
            )

        setattr(cls, TAGGABLE_KIND_ATTR, kind)
        _registry[kind] = cls
        SupportTagging.register(cls)
        return cls

    return register_kind


def kind_of(cls: type) -> str:
    """Return the kind `cls` is registered under.

    :raise ValueError: if `cls` is not a registered taggable class.
    """
    kind = getattr(cls, TAGGABLE_KIND_ATTR, None)
    if kind is None or kind not in _registry:
        raise ValueError(f"{fqcn(cls)} is not a registered taggable class")
    return kind


def class_for_kind(kind: str) -> type:
    try:
        return _registry[kind]
    except KeyError:
        raise ValueError(f"Unknown taggable kind: {kind!r}")


def registered_kinds() -> Dict[str, type]:
    return dict(_registry)


def supports_tagging(obj: Any) -> bool:
    """
    :param obj: a class or instance
    """
    if isinstance(obj, type):
        return issubclass(obj, SupportTagging)

    if not isinstance(obj, SupportTagging):
        return False

    if obj.id is None:
        return False

    return True


class TaggableRef(NamedTuple):
    """Reference to a taggable object: its registered kind and its id."""

    kind: str
    id: int

    @classmethod
    def of(cls, kind: str, taggable_id: Any) -> "TaggableRef":
        if kind not in _registry:
            raise ValueError(f"Unknown taggable kind: {kind!r}")

        # bool is an int subclass, but certainly not an identifier
        if isinstance(taggable_id, bool) or not isinstance(taggable_id, int):
            raise ValueError(f"Invalid taggable id: {taggable_id!r}")

        return cls(kind, taggable_id)

    @classmethod
    def for_object(cls, obj: Any) -> "TaggableRef":
        kind = kind_of(type(obj))
        if obj.id is None:
            raise ValueError(
                f"{obj!r} has no id yet: add it to a session and flush first"
            )
        return cls(kind, obj.id)

    def __str__(self):
        return f"{self.kind}:{self.id}"


class Tag(IdMixin, Model):
    """A text label attached to one taggable object.

    The object is referenced by its kind and id (see :class:`TaggableRef`),
    so tags can be attached to any registered model class.
    """

    __tablename__ = "tag"

    #: Label visible to the user
    label = sa.Column(sa.UnicodeText(), nullable=False, index=True)

    #: kind of the tagged object
    taggable_type = sa.Column(sa.String(1000), nullable=False, index=True)

    #: id of the tagged object
    taggable_id = sa.Column(sa.Integer, nullable=False, index=True)

    __table_args__ = (
        sa.UniqueConstraint(label, taggable_type, taggable_id),
        # label is not empty
        sa.CheckConstraint(label != ""),
    )

    @sa.orm.validates("label")
    def validate_label(self, key: str, label: str) -> str:
        if not isinstance(label, str) or not label:
            raise ValueError(f"Tag label must be a non-empty string, got {label!r}")
        return label

    @property
    def ref(self) -> TaggableRef:
        return TaggableRef(self.taggable_type, self.taggable_id)

    def __str__(self):
        return self.label

    def __repr__(self):
        cls = self.__class__
        return (
            "<{mod}.{cls} id={t.id!r} label={t.label!r} "
            "taggable={t.taggable_type}:{t.taggable_id} at 0x{addr:x}>".format(
                mod=cls.__module__, cls=cls.__name__, t=self, addr=id(self)
            )
        )


def _tagging_service() -> "TaggingService":
    from tagger.services import get_service
    from tagger.services.base import ServiceNotRegistered

    service = get_service("tagging")
    if service is None:
        raise ServiceNotRegistered("tagging")
    return service


class Taggable:
    """Mixin for taggable models.

    Instances get a read-only `tags` relationship and list/add/remove helpers;
    all writes go through the `tagging` service. The class must also be
    registered with :func:`register`.

    `tags` is loaded lazily and kept until invalidated: writes made with the
    helpers below invalidate it, writes made directly with the service's
    `*_by_type_and_id` methods don't (see
    :meth:`~tagger.services.tagging.TaggingService.invalidate`).
    """

    @declared_attr
    def tags(cls):
        return sa.orm.relationship(
            Tag,
            primaryjoin=lambda: sa.and_(
                cls.id == sa.orm.foreign(sa.orm.remote(Tag.taggable_id)),
                Tag.taggable_type == kind_of(cls),
            ),
            order_by=Tag.id,
            viewonly=True,
            lazy="select",
        )

    @property
    def tag_ref(self) -> TaggableRef:
        return TaggableRef.for_object(self)

    @property
    def tag_list(self) -> List[str]:
        """Labels of the tags currently on this object."""
        return [t.label for t in self.tags]

    @tag_list.setter
    def tag_list(self, new_list: str) -> None:
        self.set_tag_list(new_list)

    def set_tag_list(self, new_list: str, delimiter: Optional[str] = None) -> "TagDiff":
        """Add and remove tags so that this object's tags match `new_list`, a
        `delimiter`-separated string of labels."""
        return _tagging_service().update_tags_from_list(self, new_list, delimiter)

    def add_tag(self, label: str) -> None:
        _tagging_service().add_by_object_strict(self, label)

    def remove_tag(self, label: str) -> None:
        _tagging_service().remove_by_object_strict(self, label)

    @classmethod
    def find_by_tag(cls, label: str) -> Query:
        """Query of all instances of this class tagged with `label`."""
        return _tagging_service().get_objects_tagged_with(cls, label)
