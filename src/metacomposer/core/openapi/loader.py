"""
Loading OpenAPI documents from URLs or local files.

Remote documents are fetched with httpx; local documents are read from disk.
Both JSON and YAML are accepted since YAML is a superset of JSON.
"""

import logging
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlparse

import httpx
import yaml

from metacomposer.core.config import HttpConfig
from metacomposer.core.exceptions import FetchError

logger = logging.getLogger(__name__)


def is_remote(uri: str) -> bool:
    """Check whether uri is an http(s) URL."""
    return urlparse(uri).scheme in ("http", "https")


def _local_path(uri: str) -> Path:
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(uri).expanduser()


def _fetch_remote(
    uri: str,
    config: HttpConfig,
    transport: httpx.BaseTransport | None = None,
) -> str:
    logger.debug("Fetching OpenAPI document from %s", uri)
    try:
        with httpx.Client(
            timeout=config.timeout,
            follow_redirects=config.follow_redirects,
            transport=transport,
        ) as client:
            response = client.get(uri)
    except httpx.TimeoutException as e:
        raise FetchError(uri, f"timed out after {config.timeout}s") from e
    except httpx.HTTPError as e:
        raise FetchError(uri, str(e)) from e

    if not response.is_success:
        raise FetchError(
            uri,
            f"HTTP error! status: {response.status_code}",
            status=response.status_code,
        )
    return response.text


def _read_local(uri: str) -> str:
    path = _local_path(uri)
    logger.debug("Reading OpenAPI document from %s", path)
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise FetchError(uri, "no such file") from e
    except OSError as e:
        raise FetchError(uri, str(e)) from e


def load_document(
    uri: str,
    config: HttpConfig | None = None,
    transport: httpx.BaseTransport | None = None,
) -> dict[str, Any]:
    """
    Load an OpenAPI document.

    Args:
        uri: http(s) URL, file:// URI, or filesystem path
        config: HTTP settings (defaults to HttpConfig())
        transport: Optional httpx transport, used by tests

    Returns:
        Parsed document

    Raises:
        FetchError: If the document cannot be loaded, parsed, or is not a mapping
    """
    if config is None:
        config = HttpConfig()

    if is_remote(uri):
        text = _fetch_remote(uri, config, transport)
    else:
        text = _read_local(uri)

    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise FetchError(uri, f"not valid JSON or YAML: {e}") from e

    if not isinstance(document, dict):
        raise FetchError(uri, "document is not an OpenAPI object")

    return document
