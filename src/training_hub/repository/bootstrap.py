"""Materialización de módulos por defecto en el almacén."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Iterable

from ..clients.assets import AssetClient
from ..core.module import PersistedTrainingModule
from .fanout import bounded_gather

logger = logging.getLogger(__name__)

Importer = Callable[[list[bytes]], Awaitable[list[PersistedTrainingModule]]]


class DefaultModuleBootstrapper:
    """Importa los módulos empaquetados que falten en el almacén."""

    def __init__(
        self,
        default_ids: Iterable[str],
        assets: AssetClient,
        importer: Importer,
        max_concurrency: int = 4,
    ) -> None:
        """Inicializar con el conjunto cerrado de ids por defecto."""
        self.default_ids: tuple[str, ...] = tuple(dict.fromkeys(default_ids))
        self.assets = assets
        self.importer = importer
        self.max_concurrency = max_concurrency

    def is_default(self, module_id: str) -> bool:
        return module_id in self.default_ids

    def missing(self, stored_ids: Iterable[str]) -> list[str]:
        """Ids por defecto ausentes del almacén."""
        present = set(stored_ids)
        return [module_id for module_id in self.default_ids if module_id not in present]

    async def bootstrap(self, module_id: str) -> PersistedTrainingModule | None:
        """Descargar e importar un módulo por defecto.

        Devuelve None si el id no es por defecto o si el asset no está
        disponible; nunca lanza.
        """
        if not self.is_default(module_id):
            return None
        return await self._import(module_id, await self._fetch(module_id))

    async def bootstrap_many(
        self, module_ids: Iterable[str]
    ) -> list[PersistedTrainingModule | None]:
        """Descargas concurrentes (acotadas), importación secuencial."""
        module_ids = [module_id for module_id in module_ids if self.is_default(module_id)]
        archives = await bounded_gather(module_ids, self._fetch, self.max_concurrency)

        # Las escrituras van en serie: cada una reescribe la colección
        return [
            await self._import(module_id, archive)
            for module_id, archive in zip(module_ids, archives)
        ]

    async def _fetch(self, module_id: str) -> bytes | None:
        try:
            return await self.assets.get_module_archive(module_id)
        except Exception as e:
            logger.warning("Módulo por defecto no disponible %s: %s", module_id, e)
            return None

    async def _import(
        self, module_id: str, archive: bytes | None
    ) -> PersistedTrainingModule | None:
        if archive is None:
            return None

        try:
            modules = await self.importer([archive])
        except Exception as e:
            logger.warning("Asset inválido para el módulo %s: %s", module_id, e)
            return None

        if not modules:
            logger.warning("El asset del módulo %s no contiene registros", module_id)
            return None
        return modules[0]
