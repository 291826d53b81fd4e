"""Resultados explícitos para operaciones con política de degradación."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Operación completada."""

    value: T


@dataclass(frozen=True)
class Degraded(Generic[T]):
    """Fallo absorbido: se entrega un valor vacío en lugar del error."""

    value: T
    error: Exception


@dataclass(frozen=True)
class Fatal:
    """Fallo que debe propagarse al llamador."""

    error: Exception


Outcome = Union[Ok[T], Degraded[T], Fatal]


def unwrap(outcome: Outcome[T]) -> T:
    """Obtener el valor, relanzando el error si es fatal."""
    if isinstance(outcome, Fatal):
        raise outcome.error
    return outcome.value
