"""Clientes HTTP: assets, instancia y proveedor de traducciones."""

from .assets import AssetClient
from .instance import DhisInstance, IdentityContext, InstanceContext
from .poeditor import PoEditorApi, TermTranslation, TranslationProviderError

__all__ = [
    "AssetClient",
    "DhisInstance",
    "IdentityContext",
    "InstanceContext",
    "PoEditorApi",
    "TermTranslation",
    "TranslationProviderError",
]
