"""Compatibilidad de módulos con la versión de la instancia."""

from __future__ import annotations

import re

_MAJOR_RE = re.compile(r"\d+")


def get_major_version(version: str) -> int | None:
    """Primer componente numérico de la versión ("3.1.0" -> 3)."""
    match = _MAJOR_RE.search(version.strip().split(".")[0])
    return int(match.group()) if match else None


def is_version_compatible(version_range: str, instance_version: str) -> bool:
    """Rango vacío: compatible con todo. Si no, algún especificador con la misma versión mayor."""
    specifiers = [spec.strip() for spec in (version_range or "").split(",") if spec.strip()]
    if not specifiers:
        return True

    target = get_major_version(instance_version)
    if target is None:
        return False
    return any(get_major_version(spec) == target for spec in specifiers)
