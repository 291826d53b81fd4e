"""Sincronización de textos localizados con el proveedor de traducciones."""

from __future__ import annotations

import copy
import logging
from collections import defaultdict
from typing import Awaitable, Callable

from ..clients.poeditor import PoEditorApi
from ..core.module import PersistedTrainingModule, now_iso
from ..core.result import Degraded, Ok, Outcome
from ..storage.client import Namespaces, StorageClient
from .fanout import bounded_gather

logger = logging.getLogger(__name__)

Dictionary = dict[str, dict[str, str]]
Saver = Callable[[PersistedTrainingModule], Awaitable[PersistedTrainingModule]]
ApiFactory = Callable[[str], PoEditorApi]


async def fetch_dictionary(api: PoEditorApi, project_id: int, max_concurrency: int = 4) -> Dictionary:
    """Obtener `term -> {idioma -> texto}` para todos los idiomas del proyecto."""
    languages = await api.list_languages(project_id)

    async def fetch(language: str) -> tuple[str, list]:
        return language, await api.list_terms(project_id, language)

    dictionary: Dictionary = defaultdict(dict)
    for language, terms in await bounded_gather(languages, fetch, max_concurrency):
        for item in terms:
            dictionary[item.term][language] = item.translation
    return dict(dictionary)


def apply_dictionary(
    module: PersistedTrainingModule,
    dictionary: Dictionary,
    synced_at: str | None = None,
) -> PersistedTrainingModule:
    """Reemplazar las traducciones de cada nodo localizable.

    No mezcla con las traducciones previas: una clave sin entrada en el
    diccionario queda con un mapa vacío.
    """
    translated = copy.deepcopy(module)
    for text in translated.iter_texts():
        text.translations = dict(dictionary.get(text.key, {}))
    translated.last_translation_sync = synced_at or now_iso()
    return translated


class TranslationSynchronizer:
    """Descarga traducciones y reescribe el módulo almacenado."""

    def __init__(
        self,
        storage: StorageClient,
        save: Saver,
        token: str | None,
        api_factory: ApiFactory = PoEditorApi,
        max_concurrency: int = 4,
    ) -> None:
        self.storage = storage
        self.save = save
        self.token = token
        self.api_factory = api_factory
        self.max_concurrency = max_concurrency

    async def sync(self, module_id: str) -> Outcome[PersistedTrainingModule | None]:
        """Sincronizar un módulo. Nunca lanza.

        Ok(None) si no hay nada que hacer, Ok(módulo) si se reescribió,
        Degraded(None, error) si algo falló (el almacén queda intacto).
        """
        try:
            data = await self.storage.get_in_collection(Namespaces.TRAINING_MODULES, module_id)
            if data is None or not self.token:
                return Ok(None)

            module = PersistedTrainingModule.from_dict(data)
            if not module.translation.active:
                return Ok(None)

            project_id = int(module.translation.project)
            async with self.api_factory(self.token) as api:
                dictionary = await fetch_dictionary(api, project_id, self.max_concurrency)

            # Reescritura completa antes de persistir una única vez
            translated = await self.save(apply_dictionary(module, dictionary))
        except Exception as e:
            logger.exception("Error sincronizando traducciones de %s", module_id)
            return Degraded(None, e)

        logger.info("Traducciones sincronizadas para %s (%d términos)", module_id, len(dictionary))
        return Ok(translated)
