"""Errores del dominio APOD.

Todos heredan de `ApodError` para que la CLI pueda capturarlos en un único
punto. El Core los lanza pero nunca los registra (logging) ni reintenta.
"""

from __future__ import annotations


class ApodError(Exception):
    """Base de todos los errores de afetch."""


class InvalidIntent(ApodError):
    """Campos de modo en conflicto o fuera de rango (p.ej. date + count)."""


class TransportError(ApodError):
    """Fallo de red o de status HTTP al llamar a la API o al bajar una imagen."""

    def __init__(self, message: str, *, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class DecodeError(ApodError):
    """La respuesta no encaja ni como objeto único ni como lista de objetos."""

    def __init__(
        self,
        message: str,
        *,
        excerpt: str,
        single_error: Exception | None = None,
        collection_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.excerpt = excerpt
        self.single_error = single_error
        self.collection_error = collection_error


class UpstreamError(ApodError):
    """La API devolvió su objeto de error documentado en lugar de registros."""

    def __init__(self, message: str, *, code: str | int | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class NotAnImage(ApodError):
    """Se pidió la imagen de un registro cuyo `media_type` no es `image`."""

    def __init__(self, media_type: str) -> None:
        super().__init__(f"APOD entry is not an image (media_type={media_type!r})")
        self.media_type = media_type
