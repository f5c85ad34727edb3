"""
Content mirror fetcher.

A pointer is either a bare content identifier ("bafy...") or a rooted path
("bafy.../snapshot.canonical.json"). Each shape expands against its own family
of mirror URL templates; mirrors are tried strictly in order and the first
response that looks like a JSON document wins.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import requests
from requests.exceptions import RequestException, Timeout

from navproof.config import DEFAULT_FILE_TEMPLATES, DEFAULT_PATH_TEMPLATES, Settings
from navproof.errors import AllMirrorsExhaustedError, FormatError, NetworkError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0
_HTML_PREFIXES = (b"<!doctype", b"<html")


@dataclass(frozen=True)
class MirrorResponse:
    url: str
    content: bytes


def is_path_pointer(pointer: str) -> bool:
    return "/" in pointer


def looks_like_html(content: bytes) -> bool:
    head = content[:64].lstrip().lower()
    return head.startswith(_HTML_PREFIXES)


class GatewayFetcher:
    def __init__(
        self,
        file_templates: Sequence[str] | None = None,
        path_templates: Sequence[str] | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.file_templates = list(file_templates or DEFAULT_FILE_TEMPLATES.split(","))
        self.path_templates = list(path_templates or DEFAULT_PATH_TEMPLATES.split(","))
        self.timeout = float(timeout)
        self.session = session

    @classmethod
    def from_settings(cls, settings: Settings) -> GatewayFetcher:
        return cls(
            file_templates=settings.file_templates,
            path_templates=settings.path_templates,
            timeout=settings.gateway_timeout,
        )

    def mirror_urls(self, pointer: str) -> list[str]:
        pointer = pointer.strip().strip("/")
        templates = self.path_templates if is_path_pointer(pointer) else self.file_templates
        return [t.format(pointer=pointer) for t in templates]

    def _get(self, url: str) -> requests.Response:
        http = self.session or requests
        return http.get(url, headers={"Cache-Control": "no-store"}, timeout=self.timeout)

    def _fetch_one(self, url: str) -> bytes:
        try:
            resp = self._get(url)
        except Timeout as e:
            raise NetworkError(f"{url} -> timed out after {self.timeout:g}s") from e
        except RequestException as e:
            raise NetworkError(f"{url} -> {e}") from e
        if not resp.ok:
            raise NetworkError(f"{url} -> {resp.status_code}")
        content = resp.content
        if looks_like_html(content):
            raise FormatError(f"{url} -> HTML response (not JSON)")
        return content

    def fetch(self, pointer: str) -> MirrorResponse:
        """
        Return the first mirror's bytes that pass the shape check.

        Raises AllMirrorsExhaustedError (carrying every per-mirror failure)
        when no mirror produced a usable payload.
        """
        if not pointer or not pointer.strip():
            raise ValueError("No content pointer provided")

        failures: list[Exception] = []
        for url in self.mirror_urls(pointer):
            try:
                content = self._fetch_one(url)
            except (NetworkError, FormatError) as e:
                logger.debug("Mirror failed: %s", e)
                failures.append(e)
                continue
            return MirrorResponse(url=url, content=content)
        raise AllMirrorsExhaustedError(pointer, failures)
