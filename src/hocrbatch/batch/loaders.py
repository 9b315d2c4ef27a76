"""
Reading batch, settings and property documents.

Every document hocrbatch reads is a JSON object, stored either on the
shared filesystem or behind an HTTP(S) endpoint. Remote documents are
fetched with httpx.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
import json

import httpx

from .models import Batch

URL_SCHEMES = ("http://", "https://")
DEFAULT_TIMEOUT = 10.0


def is_url(source: str | Path) -> bool:
    """Return True when source names an HTTP(S) resource rather than a file."""
    return isinstance(source, str) and source.lower().startswith(URL_SCHEMES)


def _expect_object(data: Any, source: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {source}, got {type(data).__name__}")
    return data


def fetch_json(
    url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    client: httpx.Client | None = None,
) -> dict[str, Any]:
    """
    Fetch a JSON object over HTTP(S).

    Parameters:
        url: Document URL; redirects are followed
        timeout: Request timeout in seconds, used when no client is given
        client: Existing httpx client to reuse

    Raises:
        httpx.HTTPError: If the request fails or returns an error status
        ValueError: If the body is not a JSON object
    """
    if client is None:
        with httpx.Client(timeout=timeout, follow_redirects=True) as owned:
            return fetch_json(url, client=owned)

    resp = client.get(url)
    resp.raise_for_status()
    return _expect_object(resp.json(), url)


def load_json(path_or_url: str | Path, *, client: httpx.Client | None = None) -> dict[str, Any]:
    """
    Load a JSON object from a file path or URL.

    Raises:
        FileNotFoundError: If the file does not exist
        httpx.HTTPError: If the URL fetch fails
        ValueError: If the content is not a JSON object

    Example:
        >>> data = load_json("https://example.org/batch/BI1.json")
        >>> data = load_json(Path("/data/local/BI1/batch.json"))
    """
    if is_url(path_or_url):
        return fetch_json(str(path_or_url), client=client)

    path = Path(path_or_url).expanduser()
    return _expect_object(json.loads(path.read_text(encoding="utf-8")), str(path))


def parse_batch(data: dict[str, Any]) -> Batch:
    """
    Validate a batch document.

    Raises:
        pydantic.ValidationError: If the document lacks the batch identifier
            or has malformed documents/pages
    """
    return Batch.model_validate(data)


def load_batch(path_or_url: str | Path, *, client: httpx.Client | None = None) -> Batch:
    """Load and validate a batch document from a path or URL."""
    return parse_batch(load_json(path_or_url, client=client))
