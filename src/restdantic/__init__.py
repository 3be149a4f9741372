"""
REST resources with lazy one-to-many relationships.

Resources wrap the raw JSON of a REST API. A parent's related resources are
exposed through :class:`HasManyProxy`, which behaves like a list while also
building, saving, filtering and bulk-deleting children bound to the parent.
"""

from .client import Client
from .config import ClientOptions
from .proxy import HasManyProxy
from .resource import HasMany, Resource, has_many
from .resources import Comment, Issue, Watcher

__all__ = (
    "Client",
    "ClientOptions",
    "Comment",
    "HasMany",
    "HasManyProxy",
    "Issue",
    "Resource",
    "Watcher",
    "has_many",
)
