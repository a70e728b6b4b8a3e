"""Contrato de una fuente APOD.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- La CLI y los tests pueden usar un cliente HTTP real o un doble en memoria.
"""

from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable

from core.domain.models import ApodRecord, ImageAsset, QueryIntent, ResultSet


@runtime_checkable
class ApodSource(Protocol):
    """Contrato mínimo para obtener registros APOD y sus imágenes.

    Reglas de diseño:
    - Síncrono: una petición por llamada, sin estado compartido.
    - Los errores se propagan como subclases de `ApodError`.
    """

    def fetch(self, intent: QueryIntent) -> ResultSet:
        """Ejecuta la consulta y devuelve el `ResultSet` decodificado."""

        ...

    def fetch_image(self, record: ApodRecord, prefer_hd: bool = False) -> ImageAsset:
        """Descarga los bytes de la imagen de un registro."""

        ...

    def fetch_images(
        self,
        records: Iterable[ApodRecord],
        prefer_hd: bool = False,
        skip_non_images: bool = False,
    ) -> list[tuple[ApodRecord, ImageAsset]]:
        """Descarga las imágenes de varios registros respetando el orden."""

        ...
