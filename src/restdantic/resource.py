from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar, Dict, Generic, List, Sequence, TypeVar

from pydantic import BaseModel

from .exceptions import MissingAssociationError
from .proxy import HasManyProxy
from .utils import underscore

if TYPE_CHECKING:
    from .client import Client

R = TypeVar("R", bound="Resource")
C = TypeVar("C", bound="Resource")


def _deep_merge(base: Mapping[str, Any], update: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in update.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


class Resource:
    """A single REST resource backed by a raw JSON ``attrs`` mapping.

    Subclasses name the parents they live under with ``belongs_to``; each one
    must be passed to the constructor either as the parent resource
    (``issue=issue``) or as its key (``issue_id="10002"``). Keys of ``attrs``
    are readable as attributes (``comment.body``).

    Class attributes
    ----------------
    endpoint_name:
        Path segment of the collection. Defaults to the snake_case class name.
    collection_key:
        Key holding the list when a collection response is wrapped in an
        object (``{"comments": [...]}``). Defaults to ``endpoint_name + "s"``.
    key_attribute:
        Attribute identifying a saved resource.
    model:
        Optional Pydantic model used by :meth:`to_model`.
    """

    belongs_to: ClassVar[Sequence[str]] = ()
    endpoint_name: ClassVar[str] = "resource"
    collection_key: ClassVar[str] = "resources"
    key_attribute: ClassVar[str] = "id"
    model: ClassVar[type[BaseModel] | None] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "endpoint_name" not in cls.__dict__:
            cls.endpoint_name = underscore(cls.__name__)
        if "collection_key" not in cls.__dict__:
            cls.collection_key = cls.endpoint_name + "s"

    def __init__(self, client: Client, attrs: Mapping[str, Any] | None = None, **associations: Any) -> None:
        self.client = client
        self.attrs = attrs or {}
        self.expanded = False
        self.deleted = False
        self._association_ids = self._resolve_associations(associations)
        for name in self.belongs_to:
            setattr(self, name, associations.get(name))
            setattr(self, f"{name}_id", self._association_ids[name])

    # Class-level helpers -----------------------------------------------
    @classmethod
    def association_key(cls) -> str:
        """Attribute name children use to refer back to this resource type."""
        return underscore(cls.__name__)

    @classmethod
    def collection_path(cls, client: Client, prefix: str = "/") -> str:
        return client.options.rest_base_path + prefix + cls.endpoint_name

    @classmethod
    def all(cls: type[R], client: Client, **associations: Any) -> List[R]:
        """Fetch every resource of this type under the given parents."""
        prefix = cls._prefix_for(cls._resolve_associations(associations))
        response = client.get(cls.collection_path(client, prefix))
        payload = client.parse_json(response.text) or []
        if isinstance(payload, Mapping):
            payload = payload.get(cls.collection_key, [])
        return [cls(client, attrs=item, **associations) for item in payload]

    @classmethod
    def find(cls: type[R], client: Client, key: Any, **associations: Any) -> R:
        instance = cls(client, attrs={cls.key_attribute: key}, **associations)
        instance.fetch()
        return instance

    @classmethod
    def _resolve_associations(cls, associations: Mapping[str, Any]) -> dict[str, Any]:
        accepted = set(cls.belongs_to) | {f"{name}_id" for name in cls.belongs_to}
        unexpected = sorted(set(associations) - accepted)
        if unexpected:
            raise TypeError(f"{cls.__name__}() got unexpected associations: {', '.join(unexpected)}")
        resolved: dict[str, Any] = {}
        for name in cls.belongs_to:
            if associations.get(name) is not None:
                resolved[name] = associations[name].id
            elif associations.get(f"{name}_id") is not None:
                resolved[name] = associations[f"{name}_id"]
            else:
                raise MissingAssociationError(f"{cls.__name__} requires '{name}' or '{name}_id'")
        return resolved

    @classmethod
    def _prefix_for(cls, association_ids: Mapping[str, Any]) -> str:
        prefix = "/"
        for name in cls.belongs_to:
            prefix += f"{name}/{association_ids[name]}/"
        return prefix

    # Attributes --------------------------------------------------------
    @property
    def attrs(self) -> Dict[str, Any]:
        return self._attrs

    @attrs.setter
    def attrs(self, value: Mapping[str, Any]) -> None:
        self._attrs = dict(value)
        # relationship proxies are parsed from attrs
        self._relations: dict[str, HasManyProxy[Any]] = {}

    def set_attrs(self, attrs: Mapping[str, Any], clobber: bool = True) -> None:
        """Merge ``attrs`` into the current attributes.

        ``clobber`` replaces top-level keys wholesale; otherwise nested
        mappings are merged recursively.
        """
        if clobber:
            self.attrs = {**self.attrs, **attrs}
        else:
            self.attrs = _deep_merge(self.attrs, attrs)

    def set_attrs_from_response(self, response: Any) -> None:
        payload = self.client.parse_json(response.text)
        if isinstance(payload, Mapping):
            self.set_attrs(payload)

    @property
    def id(self) -> Any:
        return self.attrs.get(self.key_attribute)

    @property
    def new_record(self) -> bool:
        return self.id is None

    @property
    def url(self) -> str:
        path = self.collection_path(self.client, self._prefix_for(self._association_ids))
        if self.new_record:
            return path
        return f"{path}/{self.id}"

    def to_model(self) -> BaseModel:
        if self.model is None:
            raise TypeError(f"{type(self).__name__} does not declare a model")
        return self.model.model_validate(self.attrs)

    # Remote operations -------------------------------------------------
    def fetch(self, reload: bool = False) -> "Resource":
        if self.expanded and not reload:
            return self
        response = self.client.get(self.url)
        self.set_attrs_from_response(response)
        self.expanded = True
        return self

    def save(self, payload: Mapping[str, Any]) -> bool:
        """POST a new resource or PUT an existing one.

        Raises :class:`~restdantic.exceptions.HTTPError` on a non-2xx answer.
        """
        send = self.client.post if self.new_record else self.client.put
        response = send(self.url, payload)
        self.set_attrs(payload, clobber=False)
        self.set_attrs_from_response(response)
        self.expanded = False
        return True

    def delete(self) -> bool:
        self.client.delete(self.url)
        self.deleted = True
        return True

    def __getattr__(self, name: str) -> Any:
        attrs = self.__dict__.get("_attrs")
        if attrs is not None and name in attrs:
            return attrs[name]
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.key_attribute}={self.id!r}>"


class HasMany(Generic[C]):
    """Descriptor exposing a one-to-many relationship as a :class:`HasManyProxy`.

    Children are parsed from the parent's nested payload found by walking
    ``nested_under`` and then ``attribute_key``; a missing path yields an
    empty proxy.
    """

    def __init__(
        self,
        target: type[C],
        attribute_key: str | None = None,
        nested_under: Sequence[str] = (),
        proxy_class: type[HasManyProxy[Any]] = HasManyProxy,
    ) -> None:
        self.target = target
        self.attribute_key = attribute_key
        self.nested_under = tuple(nested_under)
        self.proxy_class = proxy_class
        self.name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name
        if self.attribute_key is None:
            self.attribute_key = name

    def __get__(self, instance: Resource | None, owner: type | None = None) -> Any:
        if instance is None:
            return self
        relations = instance._relations
        if self.name not in relations:
            relations[self.name] = self._load(instance)
        return relations[self.name]

    def _load(self, instance: Resource) -> HasManyProxy[C]:
        association = {instance.association_key(): instance}
        children = [
            self.target(instance.client, attrs=raw, **association)
            for raw in self._raw_children(instance.attrs)
        ]
        return self.proxy_class(instance, self.target, children)

    def _raw_children(self, attrs: Mapping[str, Any]) -> List[Mapping[str, Any]]:
        node: Any = attrs
        for key in (*self.nested_under, self.attribute_key):
            if not isinstance(node, Mapping):
                return []
            node = node.get(key)
        if not isinstance(node, list):
            return []
        return node


has_many = HasMany
