"""Modelos, intenciones de consulta y errores del dominio APOD.

Por qué:
- Estructuras puras e inmutables (Pydantic v2) compartidas por CLI y adapters.
- El dominio no conoce httpx ni typer: solo registros, consultas y fallos.
"""
