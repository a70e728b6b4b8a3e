"""Cliente HTTP de la API APOD.

Une las piezas del Core con la red:
- `QueryBuilder` arma la petición.
- httpx la emite (fallos de red -> `TransportError`).
- `response_resolver` decodifica el cuerpo y elige la URL de cada imagen.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

import httpx

from adapters.http_client import build_client
from core.config import AppSettings
from core.domain.errors import NotAnImage, TransportError
from core.domain.models import ApodRecord, ImageAsset, QueryIntent, ResultSet
from core.interfaces.source import ApodSource
from core.services.query_builder import QueryBuilder
from core.services.response_resolver import decode, find_upstream_error, resolve_image_source

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawResponse:
    """Respuesta sin decodificar, junto a la URL efectivamente pedida."""

    url: str
    status_code: int
    content: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class ApodClient(ApodSource):
    """Implementación síncrona de `ApodSource` sobre httpx."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._builder = QueryBuilder(self._settings.api_key, endpoint=self._settings.apod_endpoint)
        self._owns_client = client is None
        self._client = client or build_client(self._settings)

    def __enter__(self) -> "ApodClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    @property
    def builder(self) -> QueryBuilder:
        return self._builder

    def fetch_raw(self, intent: QueryIntent) -> RawResponse:
        request = self._builder.build(intent)
        logger.debug("GET %s params=%s", request.url, request.param_names())
        try:
            response = self._client.request(request.method, request.url, params=list(request.params))
        except httpx.HTTPError as exc:
            raise TransportError(f"APOD request failed: {exc}", url=request.url) from exc

        logger.debug("APOD responded HTTP %s (%d bytes)", response.status_code, len(response.content))
        return RawResponse(url=str(response.url), status_code=response.status_code, content=response.content)

    def fetch(self, intent: QueryIntent) -> ResultSet:
        raw = self.fetch_raw(intent)
        if raw.ok:
            return decode(raw.content)

        # Los 4xx de la API traen un objeto de error con el motivo real.
        upstream = find_upstream_error(raw.content)
        if upstream is not None:
            raise upstream
        raise TransportError(
            f"APOD request returned HTTP {raw.status_code}",
            url=raw.url,
            status_code=raw.status_code,
        )

    def fetch_image(self, record: ApodRecord, prefer_hd: bool = False) -> ImageAsset:
        src = resolve_image_source(record, prefer_hd)
        if not src:
            raise TransportError(f"APOD entry {record.date} has no image URL", url=src)

        logger.debug("Downloading image %s", src)
        try:
            response = self._client.get(src)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"image download returned HTTP {exc.response.status_code}",
                url=src,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"image download failed: {exc}", url=src) from exc

        return ImageAsset(
            source_url=src,
            content=response.content,
            content_type=response.headers.get("content-type"),
        )

    def fetch_images(
        self,
        records: Iterable[ApodRecord],
        prefer_hd: bool = False,
        skip_non_images: bool = False,
    ) -> list[tuple[ApodRecord, ImageAsset]]:
        assets: list[tuple[ApodRecord, ImageAsset]] = []
        for record in records:
            try:
                assets.append((record, self.fetch_image(record, prefer_hd)))
            except NotAnImage:
                if not skip_non_images:
                    raise
                logger.info("Skipping %s: media_type=%s", record.date, record.media_type)
        return assets
