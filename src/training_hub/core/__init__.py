"""Core: modelos, progreso, permisos y resultados."""

from .module import (
    ModuleBuilder,
    ModuleContents,
    ModulePatch,
    ModuleStep,
    PersistedTrainingModule,
    TrainingModule,
    TranslatableText,
)
from .permissions import User, UserRole, authorize
from .progress import UserProgress
from .result import Degraded, Fatal, Ok, Outcome

__all__ = [
    "ModuleBuilder",
    "ModuleContents",
    "ModulePatch",
    "ModuleStep",
    "PersistedTrainingModule",
    "TrainingModule",
    "TranslatableText",
    "User",
    "UserRole",
    "authorize",
    "UserProgress",
    "Degraded",
    "Fatal",
    "Ok",
    "Outcome",
]
