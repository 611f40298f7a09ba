"""monday.com GraphQL API client."""

from __future__ import annotations

import json
import logging
from http.client import HTTPException
from typing import TYPE_CHECKING, Any
from urllib import request as urllib_request
from urllib.error import HTTPError

from monday_provisioner.monday.models import (
    FIELD_ASSETS,
    FIELD_DATA,
    FIELD_PUBLIC_URL,
)

if TYPE_CHECKING:
    from monday_provisioner.config import AppConfig

logger = logging.getLogger(__name__)

MONDAY_API_URL = "https://api.monday.com/v2"

ITEM_QUERY_TEMPLATE = """query {
  items (ids: [%d]) {
    id
    name
    column_values {
      column {
        title
        settings_str
      }
      value
      text
    }
  }
}"""

ASSET_QUERY_TEMPLATE = """query {
  assets (ids: [%d]) {
    id
    name
    public_url
  }
}"""


class MondayApiError(Exception):
    """Raised when the monday.com API rejects a query."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"monday.com API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


def _error_detail(body: dict[str, Any]) -> str | None:
    """Return the first error message carried by a response body, if any."""
    errors = body.get("errors")
    if errors:
        first = errors[0]
        return first.get("message", str(first)) if isinstance(first, dict) else str(first)
    if "error_message" in body:
        return str(body["error_message"])
    return None


class MondayClient:
    """Token-authenticated client for the monday.com GraphQL API."""

    def __init__(self, api_token: str, api_url: str = MONDAY_API_URL) -> None:
        """Initialise the client.

        Args:
            api_token: monday.com API token, sent verbatim as the Authorization header.
            api_url: GraphQL endpoint URL.
        """
        self._api_token = api_token
        self._api_url = api_url

    def query(self, query: str) -> dict[str, Any]:
        """POST a GraphQL query and return the parsed response body.

        Args:
            query: GraphQL query document.

        Returns:
            Parsed JSON response body as a dict.

        Raises:
            MondayApiError: If the API returns a non-2xx status code, or a body
                that carries errors and no data.
        """
        req = urllib_request.Request(
            self._api_url,
            data=json.dumps({"query": query}).encode("utf-8"),
            headers={
                "Authorization": self._api_token,
                "Content-Type": "application/json",
            },
            method="POST",
        )
        try:
            with urllib_request.urlopen(req) as resp:
                status = resp.status
                body: dict[str, Any] = json.loads(resp.read())
        except HTTPError as exc:
            raw = exc.read()
            try:
                detail = _error_detail(json.loads(raw)) or exc.reason
            except Exception:
                detail = exc.reason
            raise MondayApiError(exc.code, str(detail)) from exc

        detail = _error_detail(body)
        if detail is not None and not body.get(FIELD_DATA):
            raise MondayApiError(status, detail)
        return body

    def fetch_item(self, item_id: int | str) -> dict[str, Any] | None:
        """Fetch the column values of a single item.

        Failures are logged and reported as a missing payload so that the
        caller can continue with placeholder values.

        Args:
            item_id: Numeric monday.com item (pulse) ID.

        Returns:
            Parsed response body, or None if the request failed.
        """
        try:
            query = ITEM_QUERY_TEMPLATE % int(item_id)
            body = self.query(query)
        except (MondayApiError, HTTPException, OSError, ValueError):
            logger.error("[fetch_item] failed to fetch item; item_id:%s", item_id, exc_info=True)
            return None
        logger.info("[fetch_item] fetched item; item_id:%s", item_id)
        return body

    def fetch_asset_url(self, asset_id: int | str) -> str | None:
        """Resolve an asset ID to its public download URL.

        Args:
            asset_id: Numeric monday.com asset ID.

        Returns:
            The asset's public URL, or None if no asset matches or the request failed.
        """
        try:
            body = self.query(ASSET_QUERY_TEMPLATE % int(asset_id))
        except (MondayApiError, HTTPException, OSError, ValueError):
            logger.error(
                "[fetch_asset_url] failed to fetch asset; asset_id:%s", asset_id, exc_info=True
            )
            return None

        assets = (body.get(FIELD_DATA) or {}).get(FIELD_ASSETS) or []
        if not assets:
            logger.warning("[fetch_asset_url] no asset found; asset_id:%s", asset_id)
            return None
        asset = assets[0]
        if not isinstance(asset, dict):
            logger.warning("[fetch_asset_url] malformed asset entry; asset_id:%s", asset_id)
            return None
        url = asset.get(FIELD_PUBLIC_URL)
        return str(url) if url else None


def monday_client_from_config(config: AppConfig) -> MondayClient:
    """Construct a MondayClient from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured MondayClient instance.
    """
    return MondayClient(api_token=config.monday_api_token, api_url=config.monday_api_url)
