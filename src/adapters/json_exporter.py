"""Exportación JSON de un `ResultSet`.

Por qué JSON:
- Interoperabilidad con otras herramientas y pipelines.
- Mantiene los nombres de campo de la API (`media_type`, `hdurl`, ...), así el
  archivo se puede volver a decodificar con `response_resolver.decode`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from core.domain.models import ResultSet


def result_set_payload(result_set: ResultSet) -> Any:
    """Objeto suelto para respuestas de un registro, lista para colecciones."""

    records = [record.model_dump(mode="json", exclude_none=True) for record in result_set]
    if result_set.is_collection:
        return records
    return records[0]


def dumps_result_set(result_set: ResultSet) -> str:
    return json.dumps(result_set_payload(result_set), ensure_ascii=False, indent=2, sort_keys=True)


def export_result_set_json(*, result_set: ResultSet, output_path: Path) -> Path:
    """Exporta `result_set` a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(dumps_result_set(result_set) + "\n", encoding="utf-8")
    return output_path
