#!/usr/bin/env python3
"""
Pocket API Client
Typed access to the Pocket v3 API: the OAuth handshake plus add, send
(modify) and get (retrieve).
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, TypeVar, Union
from urllib.parse import quote, urlencode, urlparse

from credentials import Credentials, load_credentials
from data_fetcher import PocketTransport, Transport
from data_parser import (
    coerce_modify_actions,
    parse_add_response,
    parse_authorization,
    parse_modify_response,
    parse_request_token,
    parse_retrieve_response,
)
from errors import MissingAccessTokenError
from models import (
    AddedItem,
    AddParameters,
    Authorization,
    ModifyResult,
    RequestToken,
    RetrievedItem,
    RetrieveParameters,
    RetrieveResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://getpocket.com"

REQUEST_HEADERS = {
    "Content-Type": "application/json; charset=UTF-8",
    "X-Accept": "application/json",
}

T = TypeVar("T")


class PocketClient:
    """
    Client for the Pocket v3 API.

    Holds immutable credentials; an access token obtained from ``authorize``
    is applied with ``with_access_token``, which returns a new client.
    ``add``, ``modify`` and ``retrieve`` raise MissingAccessTokenError before
    touching the network when no access token is set.
    """

    def __init__(
        self,
        credentials: Credentials,
        transport: Optional[Transport] = None,
        base_url: str = DEFAULT_BASE_URL,
    ):
        """
        Initialize the client.

        Args:
            credentials: Consumer key, redirect URI and optional access token
            transport: Transport returning parsed JSON; defaults to a
                requests-based PocketTransport
            base_url: Pocket host, without the ``/v3`` prefix
        """
        self.credentials = credentials
        self.transport = transport or PocketTransport()
        self.base_url = base_url.rstrip("/")

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, **kwargs: Any) -> "PocketClient":
        """Create a client from POCKET_* environment variables."""
        return cls(load_credentials(env_file), **kwargs)

    @property
    def has_access_token(self) -> bool:
        return bool(self.credentials.access_token)

    def with_access_token(self, access_token: str) -> "PocketClient":
        """Return a client for the same app and transport with a user token."""
        return PocketClient(
            self.credentials.with_access_token(access_token),
            transport=self.transport,
            base_url=self.base_url,
        )

    # =========================================================================
    # Request dispatch
    # =========================================================================

    def _require_access_token(self, operation: str) -> None:
        if not self.credentials.access_token:
            raise MissingAccessTokenError(operation)

    def _dispatch(
        self, path: str, payload: Mapping[str, Any], decoder: Callable[[Any], T]
    ) -> T:
        """
        POST ``payload`` to ``/v3<path>`` and decode the JSON response.

        Transport failures propagate as TransportError, schema mismatches as
        ResponseValidationError.
        """
        body: Dict[str, Any] = {"consumer_key": self.credentials.consumer_key}
        if self.credentials.access_token:
            body["access_token"] = self.credentials.access_token
        body.update({key: value for key, value in payload.items() if value is not None})

        url = f"{self.base_url}/v3{path}"
        logger.debug(f"POST {url} (fields: {sorted(body)})")
        raw = self.transport.post(url, body, dict(REQUEST_HEADERS))
        return decoder(raw)

    # =========================================================================
    # Authorization
    # =========================================================================

    def request_token(self) -> RequestToken:
        """Obtain a request token to start the authorization handshake."""
        return self._dispatch(
            "/oauth/request",
            {"redirect_uri": self.credentials.redirect_uri},
            parse_request_token,
        )

    def build_authorize_url(self, code: Union[str, RequestToken]) -> str:
        """
        Build the URL the user visits to approve the app.

        The redirect URI gets the request token appended as ``code`` so the
        callback handler can tell which handshake it belongs to.
        """
        if isinstance(code, RequestToken):
            code = code.code
        if not code:
            raise ValueError("A request token code is required")

        redirect_uri = self.credentials.redirect_uri
        parsed = urlparse(redirect_uri)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"Redirect URI must be an absolute URL: {redirect_uri!r}")

        separator = "&" if parsed.query else "?"
        callback = f"{redirect_uri}{separator}code={quote(code, safe='')}"
        query = urlencode({"request_token": code, "redirect_uri": callback})
        return f"{self.base_url}/auth/authorize?{query}"

    def authorize(self, code: Union[str, RequestToken]) -> Authorization:
        """Exchange an approved request token for an access token."""
        if isinstance(code, RequestToken):
            code = code.code
        return self._dispatch("/oauth/authorize", {"code": code}, parse_authorization)

    # =========================================================================
    # Content
    # =========================================================================

    def add(
        self,
        url: str,
        title: Optional[str] = None,
        tags: Optional[Union[str, Sequence[str]]] = None,
    ) -> AddedItem:
        """
        Save a URL to the user's list.

        Args:
            url: The URL to save
            title: Title to use when Pocket cannot detect one
            tags: Comma-separated tags, or a list of tag names

        Returns:
            The item as resolved by Pocket
        """
        self._require_access_token("add")
        params = AddParameters(url=url, title=title, tags=tags)
        logger.info(f"Adding {url}")
        return self._dispatch("/add", params.to_wire(), parse_add_response)

    def modify(self, actions: Sequence[Any]) -> ModifyResult:
        """
        Apply a batch of actions in one request.

        Args:
            actions: ItemAction/TagAction models (or equivalent dicts), in order

        Returns:
            ModifyResult whose outcomes line up with ``actions``; check
            ``failures`` for actions Pocket did not apply
        """
        self._require_access_token("modify")
        batch = coerce_modify_actions(actions)
        logger.info(f"Sending {len(batch)} action(s)")
        result = self._dispatch(
            "/send",
            {"actions": [action.to_wire() for action in batch]},
            lambda raw: parse_modify_response(raw, batch),
        )
        for failure in result.failures:
            logger.debug(
                f"Action {failure.index} ({failure.action.action} "
                f"{failure.action.item_id}) was not applied"
            )
        return result

    def retrieve_page(
        self, filters: Optional[Union[RetrieveParameters, Mapping[str, Any]]] = None
    ) -> RetrieveResponse:
        """Fetch one page of items along with the response metadata."""
        self._require_access_token("retrieve")
        if filters is None:
            filters = RetrieveParameters()
        elif not isinstance(filters, RetrieveParameters):
            filters = RetrieveParameters.model_validate(dict(filters))
        return self._dispatch("/get", filters.to_wire(), parse_retrieve_response)

    def retrieve(
        self, filters: Optional[Union[RetrieveParameters, Mapping[str, Any]]] = None
    ) -> Dict[str, RetrievedItem]:
        """
        Fetch items matching ``filters``.

        Returns:
            Mapping of item id to LiveItem or TombstoneItem; branch on the
            type (or ``status``) before reading item fields
        """
        return self.retrieve_page(filters).items
