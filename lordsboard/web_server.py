"""FastAPI web server for the lords staking dashboard."""

from __future__ import annotations

import asyncio
import random
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Header, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel, Field

from lordsboard.bubblemap.models import Size
from lordsboard.bubblemap.packer import CirclePacker
from lordsboard.bubblemap.viewport import MapViewport
from lordsboard.raffle.engine import NoEligibleParticipantsError, RaffleEngine
from lordsboard.raffle.export import export_filename, winners_to_csv
from lordsboard.raffle.models import DrawResult, Participant, PrizeCategory, ValidationInfo
from lordsboard.raffle.participants import build_participants, parse_addresses, raffle_statistics
from lordsboard.staking.aggregation import owner_stats, search_owners, stakers_only
from lordsboard.staking.cache import CacheStore
from lordsboard.staking.calculator import LEVEL_DATA_KEY, calculate_all_results, validate_level_data
from lordsboard.staking.graphql import DataSourceError
from lordsboard.staking.models import FilterOptions, SortOption
from lordsboard.staking.service import StakingDataService
from lordsboard.utils.common import as_bool
from lordsboard.utils.logger import get_logger

logger = get_logger(__name__)


class ParticipantsRequest(BaseModel):
    addresses: str = ""
    use_all_stakers: bool = False


class CategoryRequest(BaseModel):
    name: str
    slots: int = Field(0, ge=0)


class DrawRequest(ParticipantsRequest):
    categories: List[CategoryRequest]
    seed: Optional[int] = None


class ResourceCost(BaseModel):
    to_reach_current: int = Field(..., alias="toReachCurrent")
    increase_from_prev: int = Field(..., alias="increaseFromPrev")


class LevelingEntry(BaseModel):
    level: int
    gold: ResourceCost
    shards: ResourceCost


class LevelDataRequest(BaseModel):
    leveling_data: List[LevelingEntry] = Field(..., alias="levelingData")
    rarity_caps: Dict[str, int] = Field(..., alias="rarityCaps")


class ResourceRequest(BaseModel):
    current_level: int
    desired_level: int


class DashboardWebServer:
    """HTTP gateway for staking data, the raffle and the bubble map."""

    def __init__(
        self,
        config: Dict[str, Any],
        service: StakingDataService,
        cache: Optional[CacheStore] = None,
    ) -> None:
        self.config = config
        self.service = service
        self.cache = cache if cache is not None else service.cache
        self._last_draw: Optional[DrawResult] = None
        self._server = None

        map_cfg = config.get("map", {})
        self.default_container = Size(
            float(map_cfg.get("container_width", 1000)),
            float(map_cfg.get("container_height", 800)),
        )

        self.app = FastAPI(
            title="Lords Staking Dashboard API",
            description="Staking data, raffle draws and the stakers bubble map",
            version="1.0.0",
        )

        self._setup_middleware()
        self._setup_routes()

    # ------------------------------------------------------------------
    # FastAPI scaffolding
    # ------------------------------------------------------------------
    def _setup_middleware(self) -> None:
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    def _require_admin(self, api_key: Optional[str]) -> None:
        expected = self.config.get("cache", {}).get("api_key")
        if not expected or api_key != expected:
            logger.warning("Rejected admin request with missing or wrong API key")
            raise HTTPException(status_code=401, detail="Unauthorized")

    def _setup_routes(self) -> None:  # noqa: C901 - routing setup intentionally verbose
        # ------------------------------------------------------------------
        # Health
        # ------------------------------------------------------------------
        @self.app.get("/api/health")
        async def health_check() -> Dict[str, Any]:
            return {
                "status": "ok",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "components": {
                    "web": True,
                    "cache": {"keys": len(self.cache)},
                    "raffle": {"hasResults": self._last_draw is not None},
                },
            }

        # ------------------------------------------------------------------
        # Staking data
        # ------------------------------------------------------------------
        @self.app.get("/api/staking-data")
        async def get_staking_data(
            start: int = Query(0, alias="from", ge=0),
            size: int = Query(50, ge=1, le=500),
            lord_specie: str = Query("All", alias="lordSpecie"),
            lord_rarity: str = Query("All", alias="lordRarity"),
            min_duration: int = Query(0, alias="minDuration", ge=0),
            only_staked: str = Query("false", alias="onlyStaked"),
            sort_by: str = Query(SortOption.DURATION_HIGH_TO_LOW.value, alias="sortBy"),
            check_master: str = Query("false", alias="checkMaster"),
        ) -> Dict[str, Any]:
            try:
                sort_option = SortOption(sort_by)
            except ValueError:
                raise HTTPException(status_code=400, detail=f"Unknown sort option: {sort_by}")

            filters = FilterOptions(
                lord_specie=lord_specie,
                lord_rarity=lord_rarity,
                min_duration=min_duration,
                sort_by=sort_option,
                only_staked=as_bool(only_staked),
            )
            try:
                data = await asyncio.to_thread(
                    self.service.get_lords, start, size, filters, as_bool(check_master)
                )
            except DataSourceError as exc:
                logger.error("Failed to load staking data: %s", exc)
                raise HTTPException(status_code=502, detail="Failed to fetch staking data")

            return {
                "lords": [lord.to_dict() for lord in data["lords"]],
                "stats": data["stats"].to_dict(),
                "total": data["total"],
                "isMasterCache": data["isMasterCache"],
                "fromCache": data["fromCache"],
            }

        @self.app.get("/api/owners")
        async def get_owners(search: str = "") -> Dict[str, Any]:
            owners = await self._load_owners()
            matched = search_owners(owners, search)
            return {
                "owners": [owner.to_dict() for owner in matched],
                "stats": owner_stats(owners).to_dict(),
                "total": len(matched),
            }

        # ------------------------------------------------------------------
        # Raffle
        # ------------------------------------------------------------------
        @self.app.post("/api/raffle/participants")
        async def raffle_participants(request: ParticipantsRequest) -> Dict[str, Any]:
            participants, validation = await self._participants_for(request)
            return {
                "participants": [self._serialize_participant(p) for p in participants],
                "stats": self._serialize_stats(participants),
                "validation": self._serialize_validation(validation),
            }

        @self.app.post("/api/raffle/draw")
        async def raffle_draw(request: DrawRequest) -> Dict[str, Any]:
            participants, _ = await self._participants_for(request)
            categories = [PrizeCategory(name=c.name, slot_count=c.slots) for c in request.categories]
            rng = random.Random(request.seed) if request.seed is not None else None

            try:
                result = RaffleEngine(rng).draw(participants, categories)
            except NoEligibleParticipantsError as exc:
                # The previous result stays available for export
                raise HTTPException(status_code=400, detail=str(exc))

            self._last_draw = result
            return self._serialize_draw(result)

        @self.app.get("/api/raffle/export")
        async def raffle_export() -> Response:
            if self._last_draw is None:
                raise HTTPException(status_code=404, detail="No raffle results to export")
            return Response(
                content=winners_to_csv(self._last_draw.categories),
                media_type="text/csv",
                headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
            )

        # ------------------------------------------------------------------
        # Bubble map
        # ------------------------------------------------------------------
        @self.app.get("/api/map/layout")
        async def map_layout(
            width: Optional[float] = Query(None, ge=0),
            height: Optional[float] = Query(None, ge=0),
            seed: Optional[int] = None,
        ) -> Dict[str, Any]:
            container = Size(
                width if width is not None else self.default_container.width,
                height if height is not None else self.default_container.height,
            )
            stakers = stakers_only(await self._load_owners())
            rng = random.Random(seed) if seed is not None else None
            result = CirclePacker(rng).pack(stakers, container)

            viewport = MapViewport(result.canvas, container, len(result.bubbles))
            layout = result.to_dict()
            layout["viewport"] = {
                **viewport.initial_state().to_dict(),
                "minZoom": viewport.min_zoom,
                "maxZoom": viewport.max_zoom,
            }
            return layout

        # ------------------------------------------------------------------
        # Admin
        # ------------------------------------------------------------------
        @self.app.post("/api/refresh-cache")
        async def refresh_cache(x_api_key: Optional[str] = Header(None)) -> Dict[str, Any]:
            self._require_admin(x_api_key)
            removed = await asyncio.to_thread(self.service.refresh)
            return {"success": True, "removed": removed}

        @self.app.get("/api/level-data")
        async def get_level_data(x_api_key: Optional[str] = Header(None)) -> Dict[str, Any]:
            self._require_admin(x_api_key)
            data = self.cache.get_master(LEVEL_DATA_KEY)
            if data is None:
                raise HTTPException(status_code=404, detail="Level data not found")
            return data

        @self.app.post("/api/level-data")
        async def set_level_data(
            request: LevelDataRequest,
            x_api_key: Optional[str] = Header(None),
        ) -> Dict[str, Any]:
            self._require_admin(x_api_key)
            payload = request.model_dump(by_alias=True)
            if not validate_level_data(payload):
                raise HTTPException(status_code=400, detail="Invalid level data")
            self.cache.set_master(LEVEL_DATA_KEY, payload)
            logger.info("Level data updated (%d levels)", len(payload["levelingData"]))
            return {"success": True}

        @self.app.post("/api/calculate-resources")
        async def calculate_resources(request: ResourceRequest) -> Dict[str, Any]:
            data = self.cache.get_master(LEVEL_DATA_KEY)
            if not validate_level_data(data):
                raise HTTPException(status_code=404, detail="Level data not found")
            return calculate_all_results(data, request.current_level, request.desired_level)

    # ------------------------------------------------------------------
    # Data helpers
    # ------------------------------------------------------------------
    async def _load_owners(self):
        try:
            return await asyncio.to_thread(self.service.get_owners)
        except DataSourceError as exc:
            logger.error("Failed to load owners: %s", exc)
            raise HTTPException(status_code=502, detail="Failed to fetch owner data")

    async def _participants_for(self, request: ParticipantsRequest):
        try:
            power_map = await asyncio.to_thread(self.service.get_raffle_power_map)
        except DataSourceError as exc:
            logger.error("Failed to load raffle power: %s", exc)
            raise HTTPException(status_code=502, detail="Failed to fetch raffle power")

        if request.use_all_stakers:
            addresses = [address for address, power in power_map.items() if power > 0]
            validation = ValidationInfo(
                lines=len(addresses),
                valid_addresses=len(addresses),
                unique_addresses=len(addresses),
            )
        else:
            addresses, validation = parse_addresses(request.addresses)

        return build_participants(addresses, power_map), validation

    # ------------------------------------------------------------------
    # Serialization helpers
    # ------------------------------------------------------------------
    def _serialize_participant(self, participant: Participant) -> Dict[str, Any]:
        return {
            "address": participant.address,
            "rafflePower": participant.raffle_power,
            "winChance": participant.win_chance,
            "status": participant.status,
        }

    def _serialize_stats(self, participants: List[Participant]) -> Dict[str, Any]:
        stats = raffle_statistics(participants)
        return {
            "total": stats.total,
            "eligible": stats.eligible,
            "ineligible": stats.ineligible,
            "totalRafflePower": stats.total_raffle_power,
        }

    def _serialize_validation(self, validation: ValidationInfo) -> Dict[str, int]:
        return {
            "lines": validation.lines,
            "validAddresses": validation.valid_addresses,
            "uniqueAddresses": validation.unique_addresses,
            "duplicates": validation.duplicates,
        }

    def _serialize_draw(self, result: DrawResult) -> Dict[str, Any]:
        return {
            "categories": [
                {
                    "name": category.name,
                    "slotCount": category.slot_count,
                    "winners": [
                        {
                            "address": winner.address,
                            "rafflePower": winner.weight,
                            "winChance": winner.win_chance,
                        }
                        for winner in category.winners
                    ],
                }
                for category in result.categories
            ],
            "totalWinners": result.total_winners,
            "exhausted": result.exhausted,
            "exhaustedAt": result.exhausted_at,
        }

    # ------------------------------------------------------------------
    # Lifecycle management
    # ------------------------------------------------------------------
    async def start(self, host: str = "0.0.0.0", port: int = 6080) -> None:
        import uvicorn

        logger.info("Starting dashboard web server on %s:%s", host, port)
        config = uvicorn.Config(self.app, host=host, port=port, log_level="info", access_log=True)
        self._server = uvicorn.Server(config)
        try:
            await self._server.serve()
        finally:
            logger.info("Dashboard web server stopped")

    async def stop(self) -> None:
        logger.info("Stopping dashboard web server")
        if self._server is not None:
            self._server.should_exit = True
