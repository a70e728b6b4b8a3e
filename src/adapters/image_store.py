"""Persistencia de imágenes descargadas.

Convención de nombres (heredada del `afetch` original):
- título en minúsculas + `.jpg`, en el directorio de descarga.
"""

from __future__ import annotations

import re
from pathlib import Path

from core.domain.models import ApodRecord, ImageAsset

_UNSAFE_CHARS = re.compile(r'[/\\:*?"<>|\x00-\x1f]')


def default_image_filename(record: ApodRecord) -> str:
    """`"Orion Nebula"` -> `"orion nebula.jpg"` (separadores de ruta reemplazados)."""

    stem = _UNSAFE_CHARS.sub("_", record.title.strip().lower())
    return f"{stem or record.date}.jpg"


def save_image(*, asset: ImageAsset, output_path: Path) -> Path:
    """Escribe los bytes de `asset` en `output_path` creando directorios."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(asset.content)
    return output_path
