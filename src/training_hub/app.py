"""Composición del repositorio a partir de la configuración."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from .clients.assets import AssetClient
from .clients.instance import DhisInstance
from .clients.poeditor import PoEditorApi
from .config import Config, get_config
from .repository.modules import TrainingModuleRepository
from .storage.client import FileStorageClient


@asynccontextmanager
async def open_repository(config: Config | None = None) -> AsyncIterator[TrainingModuleRepository]:
    """Crear repositorio con almacén en disco y clientes HTTP; cerrarlos al salir."""
    config = config or get_config()
    config.ensure_dirs()

    instance = DhisInstance(
        base_url=config.instance_url,
        auth=(config.instance_user, config.instance_password),
        timeout=config.http_timeout,
    )
    assets = AssetClient(base_url=config.assets_url, timeout=config.http_timeout)

    def poeditor_factory(token: str) -> PoEditorApi:
        return PoEditorApi(token, base_url=config.poeditor_url, timeout=config.http_timeout)

    try:
        yield TrainingModuleRepository(
            storage=FileStorageClient(config.store_dir),
            progress_storage=FileStorageClient(config.progress_dir),
            identity=instance,
            instance=instance,
            assets=assets,
            default_modules=config.default_modules,
            poeditor_token=config.poeditor_token,
            poeditor_factory=poeditor_factory,
            max_concurrency=config.max_concurrency,
        )
    finally:
        await assets.close()
        await instance.close()
