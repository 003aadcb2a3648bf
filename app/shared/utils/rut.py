# app/shared/utils/rut.py
"""Validación y formato de RUT chileno (dígito verificador módulo 11)"""
import re
from typing import Optional

_BODY_RE = re.compile(r"^\d+$")


def _clean(rut: str) -> str:
    return rut.replace(".", "").replace("-", "").strip().upper()


def compute_check_digit(body: str) -> str:
    """Dígito verificador para el cuerpo numérico de un RUT"""
    total = 0
    multiplier = 2
    for digit in reversed(body):
        total += int(digit) * multiplier
        multiplier = 2 if multiplier == 7 else multiplier + 1

    expected = 11 - (total % 11)
    if expected == 11:
        return "0"
    if expected == 10:
        return "K"
    return str(expected)


def validate_rut(rut: Optional[str]) -> bool:
    """
    Validar un RUT chileno. Acepta puntos y guión (``12.345.678-5``,
    ``12345678-5``, ``123456785``) y dígito verificador ``K`` en mayúscula o
    minúscula.
    """
    if not rut:
        return False

    cleaned = _clean(rut)
    if len(cleaned) < 2:
        return False

    body, dv = cleaned[:-1], cleaned[-1]
    if not _BODY_RE.match(body):
        return False

    return dv == compute_check_digit(body)


def format_rut(rut: str) -> str:
    """Formato canónico ``cuerpo-dv`` (sin puntos)"""
    cleaned = _clean(rut)
    return f"{cleaned[:-1]}-{cleaned[-1]}"
