"""
Staking data service

Combines the marketplace indexer, the staking contract and the cache into the
lord and owner views used by the dashboard, the raffle and the bubble map.
"""

from typing import Any, Dict, List, Optional, Tuple

from lordsboard.staking.aggregation import (
    apply_filters,
    calculate_stats,
    paginate,
    process_owners,
    raffle_power_map,
    sort_lords,
)
from lordsboard.staking.cache import CacheStore
from lordsboard.staking.models import FilterOptions, Lord, OwnerRecord
from lordsboard.utils.logger import get_logger

logger = get_logger(__name__)

MASTER_LORDS = "lords"
# Static game tables under other master keys survive a refresh
CACHE_PATTERNS = ("lords:*", "master:" + MASTER_LORDS, "owner:*", "staking:*")


class StakingDataService:
    """Cached access to the collection and its staking state"""

    def __init__(self, config: Dict[str, Any], cache: CacheStore, marketplace, staking_contract):
        self.cache = cache
        self.marketplace = marketplace
        self.staking_contract = staking_contract

        cache_config = config.get('cache', {})
        self.page_size = int(cache_config.get('page_size', 50))
        self.max_tokens = int(cache_config.get('max_tokens', 3000))
        self.staking_ttl = int(cache_config.get('staking_ttl', 3600))
        self.page_ttl = int(cache_config.get('page_ttl', 86400))

    # ------------------------------------------------------------------
    # Page fetching
    # ------------------------------------------------------------------
    def _staking_duration(self, token_id: str) -> Optional[int]:
        key = f"staking:{token_id}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached["duration"]

        duration = self.staking_contract.get_staking_duration(token_id)
        self.cache.set(key, {"duration": duration}, ttl=self.staking_ttl)
        return duration

    def fetch_page(self, start: int, size: int) -> Tuple[List[Lord], bool]:
        """Return one page of lords and whether it came from the cache."""
        key = f"lords:{start}-{size}"
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Retrieved {len(cached)} lords from cache for page {key}")
            return [Lord.from_dict(item) for item in cached], True

        lords = []
        for token in self.marketplace.fetch_tokens(size=size, start=start):
            token_id = str(token["tokenId"])
            duration = self._staking_duration(token_id)
            attributes = token.get("attributes") or {}
            lords.append(Lord(
                token_id=token_id,
                name=token.get("name", ""),
                owner=token.get("owner", ""),
                is_staked=duration is not None,
                staking_duration=duration,
                rank=list(attributes.get("rank") or []),
                specie=list(attributes.get("specie") or []),
            ))

        self.cache.set(key, [lord.to_dict() for lord in lords], ttl=self.page_ttl)
        return lords, False

    # ------------------------------------------------------------------
    # Master snapshot
    # ------------------------------------------------------------------
    def build_master_snapshot(self) -> List[Lord]:
        """Walk the whole collection page by page and store it as the master snapshot."""
        lords: List[Lord] = []
        start = 0
        while start < self.max_tokens:
            page, _ = self.fetch_page(start, self.page_size)
            if not page:
                break
            lords.extend(page)
            start += self.page_size

        self.cache.set_master(MASTER_LORDS, [lord.to_dict() for lord in lords])
        logger.info(f"Master snapshot built with {len(lords)} lords")
        return lords

    def get_master_lords(self) -> Optional[List[Lord]]:
        cached = self.cache.get_master(MASTER_LORDS)
        if cached is None:
            return None
        return [Lord.from_dict(item) for item in cached]

    def load_lords(self) -> List[Lord]:
        lords = self.get_master_lords()
        if lords is None:
            lords = self.build_master_snapshot()
        return lords

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    def get_lords(self, start: int, size: int, filters: FilterOptions, check_master: bool = False) -> Dict[str, Any]:
        if check_master:
            master = self.get_master_lords()
            if master is not None:
                selected = sort_lords(apply_filters(master, filters), filters.sort_by)
                return {
                    "lords": selected,
                    "stats": calculate_stats(master),
                    "total": len(selected),
                    "isMasterCache": True,
                    "fromCache": True,
                }

        page, from_cache = self.fetch_page(start, size)
        selected = sort_lords(apply_filters(page, filters), filters.sort_by)
        return {
            "lords": paginate(selected, 0, size),
            "stats": calculate_stats(page),
            "total": len(selected),
            "isMasterCache": False,
            "fromCache": from_cache,
        }

    def get_owners(self) -> List[OwnerRecord]:
        return process_owners(self.load_lords())

    def get_raffle_power_map(self) -> Dict[str, int]:
        return raffle_power_map(self.load_lords())

    def refresh(self) -> int:
        """Drop every cached page, snapshot and staking lookup."""
        removed = sum(self.cache.invalidate(pattern) for pattern in CACHE_PATTERNS)
        logger.info(f"Cache refreshed, {removed} keys removed")
        return removed
