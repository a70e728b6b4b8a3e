"""Servicios puros del Core: construcción de consultas y decodificación."""
