"""
Sekai Sync - Master Data Client

Fetches the three master-data collections (cards, gachas, events) as raw
JSON arrays and decodes them into typed records.

A master fetch has no retry: any transport error, non-2xx status or decode
failure raises MasterDataFetchError and aborts the run before any writes.
"""

from __future__ import annotations

from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from sekai_sync.config import settings

logger = structlog.get_logger(__name__)

# Bytes of an error response body kept in the exception message
ERROR_BODY_LIMIT = 2048

T = TypeVar("T", bound=BaseModel)


class MasterDataFetchError(RuntimeError):
    """A master-data document could not be fetched or decoded."""

    def __init__(self, url: str, message: str, status_code: int | None = None):
        self.url = url
        self.status_code = status_code
        super().__init__(f"fetch {url}: {message}")


# ---------------------------------------------------------------------------
# Pydantic Record Models
# ---------------------------------------------------------------------------


class _MasterRecord(BaseModel):
    """Upstream camelCase names are bound through aliases; unknown fields are ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Card(_MasterRecord):
    """Card master record."""
    id: int
    character_id: int = Field(default=0, alias="characterId")
    card_rarity_type: str = Field(default="", alias="cardRarityType")
    attr: str = Field(default="")
    prefix: str = Field(default="")
    assetbundle_name: str = Field(default="", alias="assetbundleName")

    @field_validator("card_rarity_type", "attr", "prefix", "assetbundle_name", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class GachaRarityRate(_MasterRecord):
    """One rarity's draw rate (percent) within a gacha."""
    card_rarity_type: str = Field(default="", alias="cardRarityType")
    lottery_type: str = Field(default="", alias="lotteryType")
    rate: float = Field(default=0.0)


class GachaPickup(_MasterRecord):
    """Featured card edge. characterId is not carried upstream."""
    gacha_id: int = Field(default=0, alias="gachaId")
    card_id: int = Field(..., alias="cardId")


class Gacha(_MasterRecord):
    """Gacha banner master record. Timestamps are epoch milliseconds."""
    id: int
    gacha_type: str = Field(default="", alias="gachaType")
    name: str = Field(default="")
    seq: int = Field(default=0)
    assetbundle_name: str = Field(default="", alias="assetbundleName")
    start_at: int = Field(default=0, alias="startAt")
    end_at: int = Field(default=0, alias="endAt")
    rarity_rates: list[GachaRarityRate] = Field(default_factory=list, alias="gachaCardRarityRates")
    pickups: list[GachaPickup] = Field(default_factory=list, alias="gachaPickups")

    @field_validator("gacha_type", "name", "assetbundle_name", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("start_at", "end_at", mode="before")
    @classmethod
    def null_to_zero(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("rarity_rates", "pickups", mode="before")
    @classmethod
    def null_to_list(cls, v: Any) -> Any:
        return [] if v is None else v


class Event(_MasterRecord):
    """Event master record. The seven *_at fields are epoch milliseconds."""
    id: int
    event_type: str = Field(default="", alias="eventType")
    name: str = Field(default="")
    assetbundle_name: str = Field(default="", alias="assetbundleName")
    bgm_assetbundle_name: str = Field(default="", alias="bgmAssetbundleName")
    event_only_component_display_start_at: int = Field(
        default=0, alias="eventOnlyComponentDisplayStartAt"
    )
    start_at: int = Field(default=0, alias="startAt")
    aggregate_at: int = Field(default=0, alias="aggregateAt")
    ranking_announce_at: int = Field(default=0, alias="rankingAnnounceAt")
    distribution_start_at: int = Field(default=0, alias="distributionStartAt")
    event_only_component_display_end_at: int = Field(
        default=0, alias="eventOnlyComponentDisplayEndAt"
    )
    closed_at: int = Field(default=0, alias="closedAt")

    @field_validator("event_type", "name", "assetbundle_name", "bgm_assetbundle_name", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator(
        "event_only_component_display_start_at",
        "start_at",
        "aggregate_at",
        "ranking_announce_at",
        "distribution_start_at",
        "event_only_component_display_end_at",
        "closed_at",
        mode="before",
    )
    @classmethod
    def null_to_zero(cls, v: Any) -> Any:
        return 0 if v is None else v


# ---------------------------------------------------------------------------
# API Client
# ---------------------------------------------------------------------------


class MasterDataClient:
    """
    Async client for the master-data JSON documents.

    Usage:
        async with MasterDataClient() as client:
            cards = await client.fetch_cards()
            gachas = await client.fetch_gachas()
            events = await client.fetch_events()
    """

    def __init__(
        self,
        cards_url: str | None = None,
        gachas_url: str | None = None,
        events_url: str | None = None,
        timeout: float | None = None,
    ):
        self._cards_url = cards_url or settings.CARDS_URL
        self._gachas_url = gachas_url or settings.GACHAS_URL
        self._events_url = events_url or settings.EVENTS_URL
        self._timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> MasterDataClient:
        self._client = httpx.AsyncClient(
            headers={
                "Accept": "application/json",
                "User-Agent": settings.USER_AGENT,
            },
            timeout=self._timeout,
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()

    async def _fetch_collection(self, kind: str, url: str, model: type[T]) -> list[T]:
        """GET a JSON array document and validate every element against model."""
        assert self._client is not None, "Client not initialized. Use 'async with'."

        logger.info("master_fetch_start", kind=kind, url=url)

        try:
            response = await self._client.get(url)
        except httpx.RequestError as e:
            logger.error("master_fetch_request_error", kind=kind, url=url, error=str(e))
            raise MasterDataFetchError(url, f"request failed: {e}") from e

        if not response.is_success:
            body = response.content[:ERROR_BODY_LIMIT].decode("utf-8", errors="replace")
            logger.error(
                "master_fetch_http_error",
                kind=kind,
                url=url,
                status_code=response.status_code,
            )
            raise MasterDataFetchError(
                url,
                f"status={response.status_code} body={body}",
                status_code=response.status_code,
            )

        try:
            records = TypeAdapter(list[model]).validate_json(response.content)
        except ValidationError as e:
            logger.error(
                "master_fetch_decode_error",
                kind=kind,
                url=url,
                error_count=e.error_count(),
            )
            raise MasterDataFetchError(url, f"decode failed: {e}") from e

        logger.info("master_fetch_complete", kind=kind, count=len(records))
        return records

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    async def fetch_cards(self) -> list[Card]:
        return await self._fetch_collection("cards", self._cards_url, Card)

    async def fetch_gachas(self) -> list[Gacha]:
        return await self._fetch_collection("gachas", self._gachas_url, Gacha)

    async def fetch_events(self) -> list[Event]:
        return await self._fetch_collection("events", self._events_url, Event)
