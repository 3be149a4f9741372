from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Mapping

import orjson
import yaml
from pydantic import BaseModel, Field, model_validator

from .exceptions import UnknownFormatError


def _read_yaml(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def _read_json(path: Path) -> Any:
    return orjson.loads(path.read_bytes())


LOADER_REGISTRY: Mapping[str, Callable[[Path], Any]] = {
    ".yaml": _read_yaml,
    ".yml": _read_yaml,
    ".json": _read_json,
}


class ClientOptions(BaseModel):
    """Connection settings shared by every resource bound to a client.

    ``rest_base_path`` is derived from ``context_path`` unless given
    explicitly, so a server mounted under ``/jira`` only needs
    ``context_path="/jira"``.
    """

    site: str
    context_path: str = ""
    rest_base_path: str | None = None
    username: str | None = None
    password: str | None = None
    verify_ssl: bool = True
    timeout: float = Field(default=30.0, gt=0)
    headers: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _derive_rest_base_path(self) -> "ClientOptions":
        self.site = self.site.rstrip("/")
        if self.rest_base_path is None:
            self.rest_base_path = self.context_path.rstrip("/") + "/rest/api/2"
        return self

    @property
    def auth(self) -> tuple[str, str] | None:
        if self.username is None:
            return None
        return (self.username, self.password or "")

    @classmethod
    def from_file(cls, path: Path | str) -> "ClientOptions":
        """Load options from a ``.yaml``/``.yml`` or ``.json`` file."""
        target = Path(path).expanduser()
        try:
            loader = LOADER_REGISTRY[target.suffix.lower()]
        except KeyError as exc:
            raise UnknownFormatError(
                f"Cannot load options from '{target.name}': unsupported extension '{target.suffix}'"
            ) from exc
        payload = loader(target)
        if not isinstance(payload, dict):
            raise ValueError(f"Options file {target} did not produce a mapping")
        return cls.model_validate(payload)
