"""Marketplace GraphQL client for the lords collection."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from lordsboard.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_ENDPOINT = "https://marketplace-graphql.skymavis.com/graphql"
DEFAULT_TOKEN_ADDRESS = "0xa1ce53b661be73bf9a5edd3f0087484f0e3e7363"

TOKENS_QUERY = """
query LordsOwners($from: Int!, $size: Int!, $tokenAddress: String) {
  erc721Tokens(from: $from, size: $size, tokenAddress: $tokenAddress) {
    results {
      name
      owner
      tokenId
      attributes
    }
  }
}
"""


class DataSourceError(RuntimeError):
    """Raised when the GraphQL indexer or the chain RPC cannot be read."""


class MarketplaceClient:
    """Thin ``requests`` wrapper around the marketplace indexer."""

    def __init__(self, config: Dict[str, Any], session: Optional[requests.Session] = None):
        graphql_cfg = config.get("graphql", {})
        self.endpoint: str = graphql_cfg.get("endpoint", DEFAULT_ENDPOINT)
        self.token_address: str = graphql_cfg.get("token_address", DEFAULT_TOKEN_ADDRESS)
        try:
            self.timeout = float(graphql_cfg.get("timeout", 15.0))
        except (TypeError, ValueError):
            self.timeout = 15.0
        self._session = session or requests.Session()

    def fetch_tokens(self, size: int = 50, start: int = 0) -> List[Dict[str, Any]]:
        """Return the raw token results for one page of the collection."""
        payload = {
            "query": TOKENS_QUERY,
            "variables": {"from": start, "size": size, "tokenAddress": self.token_address},
        }
        try:
            response = self._session.post(self.endpoint, json=payload, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except requests.exceptions.RequestException as exc:
            logger.error("GraphQL request failed: %s", exc)
            raise DataSourceError(f"GraphQL request failed: {exc}") from exc
        except ValueError as exc:
            raise DataSourceError(f"GraphQL response was not JSON: {exc}") from exc

        if body.get("errors"):
            raise DataSourceError(f"GraphQL errors: {body['errors']}")

        try:
            results = body["data"]["erc721Tokens"]["results"]
        except (KeyError, TypeError) as exc:
            raise DataSourceError("Unexpected GraphQL response shape") from exc

        logger.debug("Fetched %d tokens from=%d size=%d", len(results or []), start, size)
        return results or []

    def close(self) -> None:
        self._session.close()
