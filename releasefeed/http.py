#!/usr/bin/env python3
"""
Thin requests wrappers that map failures onto releasefeed.errors

Every external call in the pipeline goes through get_json() or get_html()
so each stage only has to catch ServiceError.
"""

import logging
from typing import Optional, Dict, Any

import requests

from releasefeed.constants import USER_AGENT
from releasefeed.errors import TransportError, NotFoundError, ParseError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15


def _get(url: str, params: Optional[Dict[str, Any]], headers: Optional[Dict[str, str]],
         timeout: float) -> requests.Response:
    try:
        response = requests.get(url, params=params, headers=headers, timeout=timeout)
    except requests.exceptions.Timeout as e:
        raise TransportError(f"Timeout after {timeout}s: {url}") from e
    except requests.exceptions.RequestException as e:
        raise TransportError(f"Request failed for {url}: {e}") from e

    if response.status_code == 404:
        raise NotFoundError(f"404 Not Found: {url}")

    try:
        response.raise_for_status()
    except requests.exceptions.HTTPError as e:
        raise TransportError(str(e), status_code=response.status_code) from e

    return response


def get_json(url: str, params: Optional[Dict[str, Any]] = None,
             timeout: float = DEFAULT_TIMEOUT) -> Any:
    """GET a JSON document"""
    response = _get(url, params, {'User-Agent': USER_AGENT}, timeout)
    try:
        return response.json()
    except ValueError as e:
        raise ParseError(f"Invalid JSON from {url}: {e}") from e


def get_html(url: str, timeout: float = DEFAULT_TIMEOUT, user_agent: str = USER_AGENT) -> str:
    """GET a page body with a browser-like User-Agent"""
    response = _get(url, None, {'User-Agent': user_agent}, timeout)
    return response.text
