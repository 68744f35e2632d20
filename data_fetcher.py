#!/usr/bin/env python3
"""
Data Fetcher Module for the Pocket API client
Handles the HTTP round trip: POST a JSON body, return the parsed JSON body.
"""

import logging
from typing import Any, Dict, Optional, Protocol

import requests
from requests import Session

from errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30

RATE_LIMIT_HEADERS = (
    "X-Limit-User-Remaining",
    "X-Limit-User-Reset",
    "X-Limit-Key-Remaining",
    "X-Limit-Key-Reset",
)


class Transport(Protocol):
    """Anything that can POST a JSON body and return the parsed JSON reply."""

    def post(self, url: str, body: Dict[str, Any], headers: Dict[str, str]) -> Any:
        ...


class PocketTransport:
    """
    Sends requests to the Pocket API over a requests Session.

    Only turns responses into parsed JSON or a TransportError. It does not
    retry, back off, or look at the meaning of the body.
    """

    def __init__(self, session: Optional[Session] = None, timeout: int = DEFAULT_TIMEOUT):
        self.session = session or requests.Session()
        self.timeout = timeout

    def post(self, url: str, body: Dict[str, Any], headers: Dict[str, str]) -> Any:
        """
        POST a JSON body and return the decoded JSON response.

        Args:
            url: Full endpoint URL
            body: Request payload, serialized as JSON
            headers: Request headers

        Returns:
            Parsed JSON response

        Raises:
            TransportError: On network errors, non-2xx status or a non-JSON body
        """
        try:
            response = self.session.post(
                url, json=body, headers=headers, timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            raise TransportError(
                f"Request to {url} timed out after {self.timeout} seconds"
            ) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Network error during API request: {e}") from e

        self._log_rate_limits(response)

        if not 200 <= response.status_code < 300:
            # Pocket reports the reason in headers, not in the body
            error_message = response.headers.get("X-Error") or response.reason or ""
            error_code = response.headers.get("X-Error-Code")
            raise TransportError(
                f"API request failed with status {response.status_code}: {error_message}",
                status=response.status_code,
                error_code=error_code,
                details={"url": url},
            )

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"Invalid JSON response: {e}",
                status=response.status_code,
                details={"url": url},
            ) from e

    def _log_rate_limits(self, response: requests.Response) -> None:
        limits = {
            name: response.headers[name]
            for name in RATE_LIMIT_HEADERS
            if name in response.headers
        }
        if limits:
            logger.debug(f"Rate limit status: {limits}")
