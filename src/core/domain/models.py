"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Validación estricta de la intención de consulta en el borde: combinaciones
  inválidas se rechazan al construir, no al armar la query.
- El mismo modelo decodifica la respuesta JSON de la API (alias y extra="ignore").

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

from datetime import date as Date
from typing import Annotated, Iterator, Literal, Union
from urllib.parse import urlencode

from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic.config import ConfigDict

from core.domain.errors import InvalidIntent

# Primer APOD publicado.
FIRST_APOD_DATE = Date(1995, 6, 16)
MAX_RANDOM_COUNT = 100


class TodayQuery(BaseModel):
    """Sin parámetro de fecha: la API devuelve el APOD de hoy."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["today"] = "today"


class DateQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["date"] = "date"
    date: Date = Field(
        ...,
        ge=FIRST_APOD_DATE,
        description="Fecha del APOD (YYYY-MM-DD).",
    )


class RangeQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["range"] = "range"
    start_date: Date = Field(..., ge=FIRST_APOD_DATE, description="Inicio del rango (incluido).")
    end_date: Date = Field(..., ge=FIRST_APOD_DATE, description="Fin del rango (incluido).")

    @model_validator(mode="after")
    def _check_order(self) -> "RangeQuery":
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class CountQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["count"] = "count"
    count: int = Field(
        ...,
        ge=1,
        le=MAX_RANDOM_COUNT,
        description="Número de APODs aleatorios a devolver.",
    )


QueryMode = Annotated[
    Union[TodayQuery, DateQuery, RangeQuery, CountQuery],
    Field(discriminator="kind"),
]


class QueryIntent(BaseModel):
    """Intención de consulta: un único modo + modificadores ortogonales.

    Por qué una unión etiquetada:
    - Es imposible representar dos modos a la vez (date y count, por ejemplo).
    """

    model_config = ConfigDict(frozen=True)

    mode: QueryMode = Field(
        default_factory=TodayQuery,
        description="Modo de selección de fechas.",
    )
    include_thumbnail: bool = Field(
        default=False,
        description="Pide `thumbnail_url` para entradas de vídeo (thumbs=True).",
    )
    api_key: str | None = Field(
        default=None,
        description="API key para esta consulta; None usa la configurada.",
    )


def build_intent(
    *,
    date: Date | str | None = None,
    start_date: Date | str | None = None,
    end_date: Date | str | None = None,
    count: int | None = None,
    include_thumbnail: bool = False,
    api_key: str | None = None,
) -> QueryIntent:
    """Construye un `QueryIntent` a partir de campos sueltos (estilo CLI).

    Reglas:
    - Nada activo -> hoy.
    - Solo `date`, solo ambos extremos del rango, o solo `count`.
    - Cualquier otra combinación lanza `InvalidIntent`.
    """

    has_date = date is not None
    has_start = start_date is not None
    has_end = end_date is not None
    has_count = count is not None

    mode: dict[str, object]
    if has_date and not (has_start or has_end or has_count):
        mode = {"kind": "date", "date": date}
    elif has_start and has_end and not (has_date or has_count):
        mode = {"kind": "range", "start_date": start_date, "end_date": end_date}
    elif has_count and not (has_date or has_start or has_end):
        mode = {"kind": "count", "count": count}
    elif not (has_date or has_start or has_end or has_count):
        mode = {"kind": "today"}
    else:
        active = [
            name
            for name, present in (
                ("date", has_date),
                ("start_date", has_start),
                ("end_date", has_end),
                ("count", has_count),
            )
            if present
        ]
        raise InvalidIntent(
            "choose exactly one of: date, start_date + end_date, count "
            f"(got {', '.join(active)})"
        )

    try:
        return QueryIntent.model_validate(
            {"mode": mode, "include_thumbnail": include_thumbnail, "api_key": api_key}
        )
    except ValidationError as exc:
        raise InvalidIntent(str(exc)) from exc


class ApodRecord(BaseModel):
    """Una entrada APOD decodificada. Inmutable."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    date: str = Field(..., min_length=1, description="Fecha de la entrada (YYYY-MM-DD).")
    title: str = Field(..., description="Título.")
    explanation: str = Field(default="", description="Texto explicativo.")
    media_type: str = Field(..., min_length=1, description="'image' o 'video'.")
    service_version: str = Field(default="", description="Versión del servicio (p.ej. 'v1').")
    url: str = Field(default="", description="URL estándar de la imagen o del vídeo.")
    hdurl: str = Field(default="", description="URL en alta definición (puede faltar).")
    thumbnail_url: str | None = Field(
        default=None,
        description="Miniatura de vídeo (solo con thumbs=True).",
    )
    copyright: str | None = Field(default=None, description="Autoría, si no es dominio público.")

    @property
    def is_image(self) -> bool:
        return self.media_type == "image"

    def summary(self) -> str:
        return (
            f"Title: {self.title}\nDate: {self.date}\n"
            f"Explanation: {self.explanation}\nURL: {self.url}"
        )


class ResultSet(BaseModel):
    """Resultado de una consulta: un registro suelto o una secuencia ordenada.

    `is_collection` refleja la forma de la respuesta (objeto vs lista), no la
    cantidad: una lista de un elemento sigue siendo una colección, y una lista
    vacía es una colección de cero elementos.
    """

    model_config = ConfigDict(frozen=True)

    records: tuple[ApodRecord, ...] = Field(default_factory=tuple)
    is_collection: bool = True

    @model_validator(mode="after")
    def _check_shape(self) -> "ResultSet":
        if not self.is_collection and len(self.records) != 1:
            raise ValueError("a single-object result holds exactly one record")
        return self

    @classmethod
    def of_single(cls, record: ApodRecord) -> "ResultSet":
        return cls(records=(record,), is_collection=False)

    @classmethod
    def of_collection(cls, records: list[ApodRecord] | tuple[ApodRecord, ...]) -> "ResultSet":
        return cls(records=tuple(records), is_collection=True)

    @property
    def single(self) -> ApodRecord | None:
        return None if self.is_collection else self.records[0]

    @property
    def is_empty(self) -> bool:
        return not self.records

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[ApodRecord]:  # type: ignore[override]
        return iter(self.records)


class ImageAsset(BaseModel):
    """Bytes de una imagen junto a la URL de origen."""

    model_config = ConfigDict(frozen=True)

    source_url: str
    content: bytes
    content_type: str | None = None


class RequestDescriptor(BaseModel):
    """Petición GET lista para emitir. Sin I/O."""

    model_config = ConfigDict(frozen=True)

    method: str = "GET"
    url: str
    params: tuple[tuple[str, str], ...] = Field(default_factory=tuple)

    @property
    def query_string(self) -> str:
        return urlencode(self.params)

    @property
    def full_url(self) -> str:
        if not self.params:
            return self.url
        return f"{self.url}?{self.query_string}"

    def param_names(self) -> list[str]:
        return [name for name, _ in self.params]
