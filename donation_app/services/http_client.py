from __future__ import annotations

"""Small urllib JSON client used by the remote reference data sources.

Only read-only GETs are made, so a request is retried a couple of times with
exponential backoff before the caller sees an HttpError.
"""
import json
import logging
import time
import urllib.error
import urllib.request
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger("donation_app.http")


class HttpError(Exception):
    pass


def _fetch_once(request: urllib.request.Request, timeout: float) -> Dict[str, Any]:
    with urllib.request.urlopen(request, timeout=timeout) as resp:  # nosec B310
        if resp.status >= 400:
            raise HttpError(f"HTTP {resp.status} for {request.full_url}")
        return json.loads(resp.read().decode("utf-8"))


def get_json(
    url: str,
    *,
    headers: Optional[Mapping[str, str]] = None,
    timeout: float = 5.0,
    retries: int = 2,
    backoff: float = 0.5,
) -> Dict[str, Any]:
    request = urllib.request.Request(
        url, headers={"Accept": "application/json", **(headers or {})}
    )
    last_err: Optional[Exception] = None
    for attempt in range(retries + 1):
        try:
            return _fetch_once(request, timeout)
        except (urllib.error.URLError, TimeoutError, HttpError, ValueError) as e:
            last_err = e
            if attempt < retries:
                logger.debug("GET %s failed (attempt %d): %s", url, attempt + 1, e)
                time.sleep(backoff * (2**attempt))
    raise HttpError(f"Failed to fetch JSON from {url}: {last_err}")
