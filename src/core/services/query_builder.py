"""Construcción de consultas para la API APOD.

Traduce un `QueryIntent` en un `RequestDescriptor` GET contra el endpoint
fijo. No hace I/O: se puede testear como una función `intent -> query`.

Formato en el cable:
- `api_key` siempre presente.
- Como mucho uno de: `date` / (`start_date`, `end_date`) / `count`.
- `thumbs=True` con la B mayúscula (la API compara el literal).
"""

from __future__ import annotations

from datetime import date as Date
from urllib.parse import parse_qsl, urlsplit

from core.config import APOD_ENDPOINT, DEMO_API_KEY
from core.domain.errors import InvalidIntent
from core.domain.models import (
    CountQuery,
    DateQuery,
    QueryIntent,
    RangeQuery,
    RequestDescriptor,
    TodayQuery,
    build_intent,
)

THUMBS_WIRE_VALUE = "True"
DATE_FORMAT = "%Y-%m-%d"


def _format_date(value: Date) -> str:
    return value.strftime(DATE_FORMAT)


class QueryBuilder:
    """Construye peticiones APOD.

    La API key por defecto es configuración explícita (normalmente
    `AppSettings.api_key`), no estado global.
    """

    def __init__(self, default_api_key: str = DEMO_API_KEY, *, endpoint: str = APOD_ENDPOINT) -> None:
        self._default_api_key = default_api_key or DEMO_API_KEY
        self._endpoint = endpoint

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def build(self, intent: QueryIntent) -> RequestDescriptor:
        params: list[tuple[str, str]] = [("api_key", intent.api_key or self._default_api_key)]

        mode = intent.mode
        if isinstance(mode, DateQuery):
            params.append(("date", _format_date(mode.date)))
        elif isinstance(mode, RangeQuery):
            params.append(("start_date", _format_date(mode.start_date)))
            params.append(("end_date", _format_date(mode.end_date)))
        elif isinstance(mode, CountQuery):
            params.append(("count", str(mode.count)))
        elif not isinstance(mode, TodayQuery):  # pragma: no cover
            raise InvalidIntent(f"unsupported query mode: {mode!r}")

        # Modificador ortogonal: se pasa tal cual en cualquier modo.
        if intent.include_thumbnail:
            params.append(("thumbs", THUMBS_WIRE_VALUE))

        return RequestDescriptor(method="GET", url=self._endpoint, params=tuple(params))


def parse_query(query: str) -> QueryIntent:
    """Reconstruye un `QueryIntent` desde una query string o una URL completa.

    Inversa de `QueryBuilder.build`. Parámetros repetidos o combinaciones de
    modos en conflicto lanzan `InvalidIntent`.
    """

    raw = urlsplit(query).query if "?" in query or "://" in query else query
    values: dict[str, str] = {}
    for key, value in parse_qsl(raw, keep_blank_values=True):
        if key in values:
            raise InvalidIntent(f"parameter repeated in query: {key}")
        values[key] = value

    count: int | None = None
    if "count" in values:
        try:
            count = int(values["count"])
        except ValueError as exc:
            raise InvalidIntent(f"count is not an integer: {values['count']!r}") from exc

    thumbs = values.get("thumbs")
    return build_intent(
        date=values.get("date"),
        start_date=values.get("start_date"),
        end_date=values.get("end_date"),
        count=count,
        include_thumbnail=thumbs is not None and thumbs.lower() == "true",
        api_key=values.get("api_key") or None,
    )
