"""Decodificación de respuestas APOD.

La API devuelve, desde el mismo endpoint, un objeto suelto (hoy / una fecha)
o una lista de objetos (rango / count). Ningún campo distingue ambas formas,
así que se intenta primero como objeto y, de forma independiente, como lista.

Si ninguna forma encaja se distingue entre:
- `UpstreamError`: el cuerpo es el objeto de error documentado de la API.
- `DecodeError`: cualquier otra cosa (HTML de un proxy, JSON truncado, ...).
"""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter, ValidationError

from core.domain.errors import DecodeError, NotAnImage, UpstreamError
from core.domain.models import ApodRecord, ResultSet

EXCERPT_LENGTH = 200

_RECORD_LIST = TypeAdapter(list[ApodRecord])
_JSON_OBJECT = TypeAdapter(dict[str, Any])


def _excerpt(raw: bytes | str) -> str:
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    if len(text) <= EXCERPT_LENGTH:
        return text
    return text[:EXCERPT_LENGTH] + "..."


def _error_from_payload(payload: Any) -> UpstreamError | None:
    """Detecta los dos formatos de error conocidos.

    - API APOD:      {"code": 400, "msg": "...", "service_version": "v1"}
    - api.data.gov:  {"error": {"code": "API_KEY_INVALID", "message": "..."}}
    """

    if not isinstance(payload, dict):
        return None

    if "msg" in payload and ("code" in payload or "service_version" in payload):
        return UpstreamError(str(payload["msg"]), code=payload.get("code"))

    nested = payload.get("error")
    if isinstance(nested, dict) and ("message" in nested or "code" in nested):
        message = str(nested.get("message") or nested.get("code"))
        return UpstreamError(message, code=nested.get("code"))

    return None


def find_upstream_error(raw: bytes | str) -> UpstreamError | None:
    """Devuelve el `UpstreamError` si el cuerpo es un objeto de error de la API."""

    # El parser de pydantic-core limita la profundidad: JSON anidado sin fin
    # termina en ValidationError, no en RecursionError.
    try:
        payload = _JSON_OBJECT.validate_json(raw)
    except ValidationError:
        return None
    return _error_from_payload(payload)


def decode(raw: bytes | str) -> ResultSet:
    """Decodifica los bytes de la API en un `ResultSet`."""

    try:
        record = ApodRecord.model_validate_json(raw)
    except ValidationError as exc:
        single_error: ValidationError = exc
    else:
        return ResultSet.of_single(record)

    try:
        records = _RECORD_LIST.validate_json(raw)
    except ValidationError as exc:
        collection_error: ValidationError = exc
    else:
        return ResultSet.of_collection(records)

    upstream = find_upstream_error(raw)
    if upstream is not None:
        raise upstream

    raise DecodeError(
        "response is neither an APOD object nor a list of APOD objects",
        excerpt=_excerpt(raw),
        single_error=single_error,
        collection_error=collection_error,
    )


def resolve_image_source(record: ApodRecord, prefer_hd: bool = False) -> str:
    """Elige qué URL descargar: `hdurl` si se pide y existe, si no `url`."""

    if not record.is_image:
        raise NotAnImage(record.media_type)
    if prefer_hd and record.hdurl:
        return record.hdurl
    return record.url
