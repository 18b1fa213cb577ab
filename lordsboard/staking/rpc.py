"""Chain RPC reads against the lords staking contract."""

from __future__ import annotations

from typing import Any, Dict, Optional

from web3 import Web3
from web3.exceptions import ContractLogicError

from lordsboard.staking.graphql import DataSourceError
from lordsboard.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_RPC_URL = "https://api.roninchain.com/rpc"
DEFAULT_STAKING_CONTRACT = "0xfb597d6fa6c08f5434e6ecf69114497343ae13dd"

# Function selector on the staking contract
STAKING_DURATION_SELECTOR = "0xe8b23f66"

NOT_LOCKED_MARKER = "Token not locked"


def encode_token_call(selector: str, token_id: str) -> str:
    """ABI-encode ``selector(uint256 tokenId)`` calldata."""
    value = int(token_id, 16) if token_id.startswith("0x") else int(token_id)
    return selector + format(value, "064x")


class StakingContractClient:
    """Synchronous web3.py wrapper for the staking duration view call."""

    def __init__(self, config: Dict[str, Any], w3: Optional[Web3] = None):
        rpc_cfg = config.get("rpc", {})
        self.rpc_url: str = rpc_cfg.get("url", DEFAULT_RPC_URL)
        try:
            self.rpc_timeout = float(rpc_cfg.get("timeout", 10.0))
        except (TypeError, ValueError):
            self.rpc_timeout = 10.0
        self.contract_address = Web3.to_checksum_address(
            rpc_cfg.get("staking_contract", DEFAULT_STAKING_CONTRACT)
        )
        self._w3 = w3 or Web3(Web3.HTTPProvider(self.rpc_url, request_kwargs={"timeout": self.rpc_timeout}))
        logger.info("Staking contract client bound to %s via %s", self.contract_address, self.rpc_url)

    def _eth_call(self, data: str) -> bytes:
        return bytes(self._w3.eth.call({"to": self.contract_address, "data": data}, "latest"))

    def get_staking_duration(self, token_id: str) -> Optional[int]:
        """Days the token has been staked, or None when it is not locked."""
        try:
            result = self._eth_call(encode_token_call(STAKING_DURATION_SELECTOR, token_id))
        except (ContractLogicError, ValueError) as exc:
            if NOT_LOCKED_MARKER in str(exc):
                return None
            raise DataSourceError(f"RPC error for token {token_id}: {exc}") from exc
        except Exception as exc:
            # Transport failures surface from the provider's HTTP session
            raise DataSourceError(f"RPC request failed for token {token_id}: {exc}") from exc

        if not result:
            return None
        return int.from_bytes(result, "big")

