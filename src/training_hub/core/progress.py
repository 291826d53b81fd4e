"""Progreso del usuario en los módulos."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable


@dataclass
class UserProgress:
    """Progreso en un módulo."""

    id: str
    last_step: int = 0  # offset del último paso visitado
    completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convertir a diccionario."""
        return {
            "id": self.id,
            "lastStep": self.last_step,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserProgress:
        """Crear desde diccionario."""
        return cls(
            id=data["id"],
            last_step=int(data.get("lastStep", 0)),
            completed=bool(data.get("completed", False)),
        )


def find_progress(snapshot: Iterable[UserProgress] | None, module_id: str) -> UserProgress:
    """Buscar el progreso de un módulo; progreso por defecto si no existe."""
    for progress in snapshot or []:
        if progress.id == module_id:
            return progress
    return UserProgress(id=module_id)
