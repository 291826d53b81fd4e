"""Repositorio de módulos de formación."""

from __future__ import annotations

import logging
from typing import Iterable

from ..clients.assets import AssetClient
from ..clients.instance import IdentityContext, InstanceContext
from ..core.module import (
    OWNER_ACCESS,
    AccessEntry,
    ModuleBuilder,
    ModulePatch,
    PersistedTrainingModule,
    TrainingModule,
    TranslatableText,
    default_training_module,
    now_iso,
    update_translation,
)
from ..core.permissions import User, authorize
from ..core.progress import UserProgress, find_progress
from ..core.result import Degraded, Fatal, Ok, Outcome, unwrap
from ..export_import.codec import ZipArchiveCodec
from ..storage.client import Namespaces, StorageClient
from .bootstrap import DefaultModuleBootstrapper
from .builder import DomainModelBuilder
from .fanout import bounded_gather
from .translations import ApiFactory, TranslationSynchronizer

logger = logging.getLogger(__name__)


class ModuleExistsError(Exception):
    """Ya existe un módulo con ese código."""

    pass


class UnknownModuleError(Exception):
    """El módulo no existe en el almacén."""

    pass


def swap_by_id(items: list[dict], id1: str, id2: str) -> list[dict]:
    """Intercambiar dos elementos por id; sin cambios si falta alguno."""
    ids = [item.get("id") for item in items]
    if id1 not in ids or id2 not in ids:
        return list(items)

    index1, index2 = ids.index(id1), ids.index(id2)
    swapped = list(items)
    swapped[index1], swapped[index2] = swapped[index2], swapped[index1]
    return swapped


class TrainingModuleRepository:
    """Módulos de usuario y por defecto sobre un almacén clave-valor.

    No hay control de concurrencia optimista: ``update`` y ``swap_order``
    leen y escriben sin comparación previa, por lo que ante escritores
    concurrentes gana el último. El repositorio no guarda estado entre
    llamadas.
    """

    def __init__(
        self,
        storage: StorageClient,
        progress_storage: StorageClient,
        identity: IdentityContext,
        instance: InstanceContext,
        assets: AssetClient,
        codec: ZipArchiveCodec | None = None,
        default_modules: Iterable[str] = (),
        poeditor_token: str | None = None,
        poeditor_factory: ApiFactory | None = None,
        max_concurrency: int = 4,
    ) -> None:
        """Inicializar repositorio con sus colaboradores."""
        self.storage = storage
        self.progress_storage = progress_storage
        self.identity = identity
        self.instance = instance
        self.codec = codec or ZipArchiveCodec()
        self.max_concurrency = max_concurrency
        self.bootstrapper = DefaultModuleBootstrapper(
            default_modules, assets, self.import_modules, max_concurrency
        )
        self.builder = DomainModelBuilder(instance)

        sync_kwargs = {"api_factory": poeditor_factory} if poeditor_factory else {}
        self.translations = TranslationSynchronizer(
            storage,
            self._save,
            poeditor_token,
            max_concurrency=max_concurrency,
            **sync_kwargs,
        )

    # Lectura

    async def list(self) -> list[TrainingModule]:
        """Listar módulos visibles para el usuario actual. Nunca lanza."""
        return unwrap(await self.list_outcome())

    async def list_outcome(self) -> Outcome[list[TrainingModule]]:
        try:
            return Ok(await self._list_visible())
        except Exception as e:
            logger.warning("No se pudieron listar los módulos: %s", e)
            return Degraded([], e)

    async def _list_visible(self) -> list[TrainingModule]:
        stored = [
            PersistedTrainingModule.from_dict(data)
            for data in await self.storage.list_in_collection(Namespaces.TRAINING_MODULES)
        ]

        missing_ids = self.bootstrapper.missing(module.id for module in stored)
        bootstrapped = await self.bootstrapper.bootstrap_many(missing_ids)

        # Los almacenados ganan ante ids repetidos
        merged: dict[str, PersistedTrainingModule] = {}
        for module in [*stored, *bootstrapped]:
            if module is not None and module.id not in merged:
                merged[module.id] = module

        user = await self.identity.get_current_user()
        progress = await self._load_progress(user)
        instance_version = await self.instance.get_version()

        visible = [module for module in merged.values() if authorize(module, user, "read")]

        async def decorate(module: PersistedTrainingModule) -> TrainingModule:
            model = await self.builder.build(module, user, instance_version)
            return model.with_progress(find_progress(progress, module.id))

        return await bounded_gather(visible, decorate, self.max_concurrency)

    async def get(self, module_id: str) -> TrainingModule | None:
        """Obtener un módulo por id (sin filtro de visibilidad)."""
        return unwrap(await self.get_outcome(module_id))

    async def get_outcome(self, module_id: str) -> Outcome[TrainingModule | None]:
        try:
            data = await self.storage.get_in_collection(Namespaces.TRAINING_MODULES, module_id)
            module = (
                PersistedTrainingModule.from_dict(data)
                if data is not None
                else await self.bootstrapper.bootstrap(module_id)
            )
            if module is None:
                return Ok(None)

            user = await self.identity.get_current_user()
            progress = await self._load_progress(user)
            instance_version = await self.instance.get_version()
            model = await self.builder.build(module, user, instance_version)
        except Exception as e:
            return Fatal(e)

        return Ok(model.with_progress(find_progress(progress, module.id)))

    async def _load_progress(self, user: User) -> list[UserProgress]:
        items = await self.progress_storage.get_object(Namespaces.user_progress(user.id))
        return [UserProgress.from_dict(item) for item in items or []]

    # Escritura

    async def _save(
        self, module: PersistedTrainingModule, recreate: bool = False
    ) -> PersistedTrainingModule:
        """Persistir el registro completo estampando la autoría."""
        current_user = await self.identity.get_current_user()
        user = current_user.ref()
        date = now_iso()

        record = module.to_dict()
        record["lastUpdatedBy"] = user.to_dict()
        record["lastUpdated"] = date
        if recreate or module.user is None:
            record["user"] = user.to_dict()
        if recreate or not module.created:
            record["created"] = date

        await self.storage.save_in_collection(Namespaces.TRAINING_MODULES, record)
        return PersistedTrainingModule.from_dict(record)

    async def update(self, patch: ModulePatch) -> None:
        """Aplicar el parche sobre la forma canónica y guardar."""
        if not patch.id or patch.name is None:
            raise ValueError("El módulo requiere id y name")

        base = default_training_module()
        existing = await self.storage.get_in_collection(Namespaces.TRAINING_MODULES, patch.id)
        if existing is not None:
            stored = PersistedTrainingModule.from_dict(existing)
            base.user = stored.user
            base.created = stored.created

        await self._save(patch.apply(base))

    async def create_module(self, builder: ModuleBuilder) -> PersistedTrainingModule:
        """Crear un módulo nuevo; el código debe ser único."""
        existing = await self.storage.get_in_collection(Namespaces.TRAINING_MODULES, builder.id)
        if existing is not None or self.bootstrapper.is_default(builder.id):
            raise ModuleExistsError(f"El módulo '{builder.id}' ya existe")

        # El creador recibe lectura y escritura sobre su módulo
        user = await self.identity.get_current_user()
        module = ModulePatch(
            id=builder.id,
            name=TranslatableText(key=f"{builder.id}-name", reference_value=builder.name),
            user_accesses=[AccessEntry(id=user.id, access=OWNER_ACCESS, name=user.name)],
        ).apply(default_training_module())
        module.contents.welcome = TranslatableText(
            key=f"{builder.id}-welcome", reference_value=builder.welcome_text()
        )

        return await self._save(module, recreate=True)

    async def edit_module(self, builder: ModuleBuilder) -> PersistedTrainingModule:
        """Actualizar nombre y bienvenida de un módulo existente."""
        data = await self.storage.get_in_collection(Namespaces.TRAINING_MODULES, builder.id)
        if data is None:
            raise UnknownModuleError(f"Módulo no encontrado: {builder.id}")

        module = PersistedTrainingModule.from_dict(data)
        module = update_translation(module, module.name.key, builder.name)
        module = update_translation(module, module.contents.welcome.key, builder.welcome_text())

        return await self._save(module)

    async def delete(self, module_ids: Iterable[str]) -> None:
        for module_id in module_ids:
            await self.storage.remove_in_collection(Namespaces.TRAINING_MODULES, module_id)

    async def swap_order(self, id1: str, id2: str) -> None:
        """Intercambiar la posición de dos módulos en la colección."""
        items = await self.storage.list_in_collection(Namespaces.TRAINING_MODULES)
        await self.storage.save_object(Namespaces.TRAINING_MODULES, swap_by_id(items, id1, id2))

    async def update_progress(self, module_id: str, last_step: int, completed: bool) -> None:
        """Guardar el progreso del usuario actual en un módulo."""
        user = await self.identity.get_current_user()
        progress = UserProgress(id=module_id, last_step=last_step, completed=completed)
        await self.progress_storage.save_in_collection(
            Namespaces.user_progress(user.id), progress.to_dict()
        )

    # Import/export

    async def import_modules(self, archives: list[bytes]) -> list[PersistedTrainingModule]:
        """Importar ZIPs; la autoría se reinicia al usuario actual."""
        modules = [PersistedTrainingModule.from_dict(data) for data in self.codec.decode(archives)]
        return [await self._save(module, recreate=True) for module in modules]

    async def export_modules(self, module_ids: Iterable[str]) -> bytes:
        records = await bounded_gather(
            module_ids,
            lambda module_id: self.storage.get_in_collection(
                Namespaces.TRAINING_MODULES, module_id
            ),
            self.max_concurrency,
        )
        return self.codec.encode(records)

    async def reset_default_value(self, module_ids: Iterable[str]) -> None:
        """Restaurar el contenido de fábrica de los ids por defecto."""
        for module_id in module_ids:
            if self.bootstrapper.is_default(module_id):
                await self.bootstrapper.bootstrap(module_id)

    # Traducciones

    async def update_translations(self, module_id: str) -> Outcome[PersistedTrainingModule | None]:
        return await self.translations.sync(module_id)
