from __future__ import annotations

import copy
import logging
import weakref
from collections.abc import MutableSequence
from typing import TYPE_CHECKING, Any, Generic, Hashable, Iterable, Iterator, List, Mapping, TypeVar, overload

from .criteria import matches, parse_criteria
from .exceptions import DetachedProxyError, RestdanticError

if TYPE_CHECKING:
    from .resource import Resource

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="Resource")

ON_ERROR_POLICIES = ("raise", "continue")


class HasManyProxy(MutableSequence, Generic[T]):
    """The resources on the "many" side of a parent's relationship.

    Reading ``issue.comments`` returns one of these. It wraps the list of
    already-known children with operations that keep new children bound to
    ``parent``::

        comment = issue.comments.build({"body": "hello"})
        comment.issue is issue  # True

    Every other list operation (``len``, iteration, indexing, ``in``,
    ``append``, ``sort``, ``+``...) acts on ``items`` directly.

    Only a weak reference to ``parent`` is kept, so a proxy taken from a
    temporary (``Issue.find(client, key).comments``) detaches once that
    issue is collected. Built children keep their parent alive, but an
    empty proxy does not. A detached proxy still filters, iterates and
    bulk-deletes, and :meth:`all` falls back to the parent's key; only
    :meth:`build` and :meth:`add` need the live parent and raise
    :class:`~restdantic.exceptions.DetachedProxyError`.

    Parameters
    ----------
    parent:
        Owning resource. Only a weak reference is kept.
    target:
        Resource type of the children.
    items:
        Children already known locally, typically parsed from the parent's
        nested payload.
    """

    def __init__(self, parent: Resource, target: type[T], items: Iterable[T] | None = None) -> None:
        self._parent_ref = weakref.ref(parent)
        self.client = parent.client
        self.association_key = parent.association_key()
        self._parent_id = parent.id
        self.target = target
        self.items: List[T] = list(items) if items is not None else []

    @property
    def parent(self) -> Resource:
        parent = self._parent_ref()
        if parent is None:
            raise DetachedProxyError(
                f"Parent of this {self.target.__name__} collection no longer exists"
            )
        return parent

    @property
    def parent_id(self) -> Any:
        parent = self._parent_ref()
        if parent is not None:
            self._parent_id = parent.id
        return self._parent_id

    # Relationship operations -------------------------------------------
    def build(self, attrs: Mapping[str, Any] | None = None) -> T:
        """Construct a child bound to ``parent`` and append it to ``items``.

        The child is not saved.
        """
        parent = self.parent
        resource = self.target(parent.client, attrs=attrs, **{parent.association_key(): parent})
        self.items.append(resource)
        return resource

    def add(self, *values: Any) -> bool:
        """Build and save one child per value, in order.

        The first failing save propagates and later values are not built.
        """
        for value in values:
            self.build().save(value)
        return True

    def all(self) -> List[T]:
        """Fetch every child of ``parent`` from the server.

        The result is independent of ``items``, which is left untouched.
        """
        parent = self._parent_ref()
        if parent is None:
            return self.target.all(self.client, **{f"{self.association_key}_id": self.parent_id})
        return self.target.all(parent.client, **{self.association_key: parent})

    def where(self, criteria: Mapping[Hashable, Any] | None = None, **kwargs: Any) -> "HasManyProxy[T]":
        """Return a new proxy holding the local items whose ``attrs`` match.

        ``criteria`` may nest mappings and list acceptable values::

            issue.comments.where({"author": {"name": ["bob", "alice"]}})
        """
        combined = dict(criteria or {})
        combined.update(kwargs)
        parsed = parse_criteria(combined)
        selection = [item for item in self.items if matches(item.attrs, parsed)]
        return self._clone(selection)

    def remove_all(self, *, on_error: str = "raise") -> bool:
        """Delete every item on the server, in order.

        ``items`` is not truncated. With ``on_error="continue"`` library errors
        are logged and skipped, and ``False`` is returned when any delete
        failed.
        """
        if on_error not in ON_ERROR_POLICIES:
            raise ValueError(f"on_error must be one of {ON_ERROR_POLICIES}, got {on_error!r}")
        logger.debug("Removing %d %s resources", len(self.items), self.target.__name__)
        succeeded = True
        for resource in self.items:
            if on_error == "raise":
                resource.delete()
                continue
            try:
                if not resource.delete():
                    succeeded = False
            except RestdanticError as exc:
                logger.warning("Failed to delete %r: %s", resource, exc)
                succeeded = False
        return succeeded

    # Sequence protocol -------------------------------------------------
    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> List[T]: ...

    def __getitem__(self, index):
        return self.items[index]

    def __setitem__(self, index, value) -> None:
        self.items[index] = value

    def __delitem__(self, index) -> None:
        del self.items[index]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __contains__(self, value: object) -> bool:
        return value in self.items

    def __reversed__(self) -> Iterator[T]:
        return reversed(self.items)

    def insert(self, index: int, value: T) -> None:
        self.items.insert(index, value)

    def index(self, value: Any, *args: Any) -> int:
        return self.items.index(value, *args)

    def count(self, value: Any) -> int:
        return self.items.count(value)

    def sort(self, *, key: Any = None, reverse: bool = False) -> None:
        self.items.sort(key=key, reverse=reverse)

    def copy(self) -> List[T]:
        return self.items.copy()

    def __add__(self, other: Any) -> List[T]:
        if isinstance(other, HasManyProxy):
            other = other.items
        return self.items + other

    def __radd__(self, other: Any) -> List[T]:
        return other + self.items

    def __mul__(self, count: int) -> List[T]:
        return self.items * count

    __rmul__ = __mul__

    def __eq__(self, other: object) -> bool:
        if isinstance(other, HasManyProxy):
            return self.items == other.items
        if isinstance(other, list):
            return self.items == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    # Utilities ---------------------------------------------------------
    def _clone(self, items: Iterable[T]) -> "HasManyProxy[T]":
        clone = copy.copy(self)
        clone.items = list(items)
        return clone

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.target.__name__}, {self.items!r})"
