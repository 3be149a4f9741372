from __future__ import annotations

import logging
from typing import Any

import orjson
import requests

from .config import ClientOptions
from .exceptions import HTTPError

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


class Client:
    """Blocking HTTP transport shared by every resource of one server.

    Paths passed to the verb helpers are appended to ``options.site``; they
    normally start with ``options.rest_base_path``.
    """

    def __init__(self, options: ClientOptions, session: requests.Session | None = None) -> None:
        self.options = options
        self.session = session if session is not None else requests.Session()
        self.session.headers.update(JSON_HEADERS)
        self.session.headers.update(options.headers)
        if options.auth is not None:
            self.session.auth = options.auth
        self.session.verify = options.verify_ssl

    # HTTP verbs --------------------------------------------------------
    def get(self, path: str) -> requests.Response:
        return self.request("GET", path)

    def post(self, path: str, body: Any = None) -> requests.Response:
        return self.request("POST", path, body)

    def put(self, path: str, body: Any = None) -> requests.Response:
        return self.request("PUT", path, body)

    def delete(self, path: str) -> requests.Response:
        return self.request("DELETE", path)

    def request(self, method: str, path: str, body: Any = None) -> requests.Response:
        url = self.options.site + path
        logger.debug("%s %s", method, url)
        response = self.session.request(
            method,
            url,
            data=self._encode(body),
            timeout=self.options.timeout,
        )
        if not 200 <= response.status_code < 300:
            raise HTTPError(response)
        return response

    # Serialization -----------------------------------------------------
    @staticmethod
    def parse_json(body: str | bytes | None) -> Any:
        if not body:
            return None
        return orjson.loads(body)

    @staticmethod
    def _encode(body: Any) -> bytes | None:
        if body is None or isinstance(body, bytes):
            return body
        return orjson.dumps(body)
