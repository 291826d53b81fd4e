"""Repositorio de módulos: bootstrap, modelo de dominio, traducciones."""

from .bootstrap import DefaultModuleBootstrapper
from .builder import DomainModelBuilder, UnsupportedVersionError
from .modules import (
    ModuleExistsError,
    TrainingModuleRepository,
    UnknownModuleError,
    swap_by_id,
)
from .translations import TranslationSynchronizer, apply_dictionary, fetch_dictionary

__all__ = [
    "DefaultModuleBootstrapper",
    "DomainModelBuilder",
    "UnsupportedVersionError",
    "ModuleExistsError",
    "TrainingModuleRepository",
    "UnknownModuleError",
    "swap_by_id",
    "TranslationSynchronizer",
    "apply_dictionary",
    "fetch_dictionary",
]
