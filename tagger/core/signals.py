"""
All signals used by tagger.

Signals allow the tagging service to notify subscribers that something
happened, without knowing about them.

Cf. http://flask.pocoo.org/docs/signals/ for detailed documentation.
"""
from blinker import Namespace

signals = Namespace()

#: Triggered at application initialization when all extensions and services
#: have been loaded
components_registered = signals.signal("app:components:registered")

#: Sent by the tagging service after a tag has been attached to an object.
#: Receivers get `ref` (a :class:`~tagger.core.models.tag.TaggableRef`) and
#: `label` keyword arguments.
tag_added = signals.signal("tagging:tag-added")

#: Sent by the tagging service after a tag has been removed from an object.
#: Same arguments as :obj:`tag_added`.
tag_removed = signals.signal("tagging:tag-removed")
