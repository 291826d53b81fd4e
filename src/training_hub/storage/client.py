"""Capa de almacenamiento clave-valor por namespaces."""

from __future__ import annotations

import asyncio
import copy
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class Namespaces:
    """Namespaces lógicos del almacén."""

    TRAINING_MODULES = "training-modules"
    PROGRESS = "progress"

    @staticmethod
    def user_progress(user_id: str) -> str:
        """Namespace del progreso de un usuario."""
        return f"{Namespaces.PROGRESS}-{user_id}"


class StorageError(Exception):
    """Error leyendo o escribiendo en el almacén."""

    pass


class StorageClient(ABC):
    """Interfaz base para almacenes.

    Una colección es un objeto lista guardado bajo un namespace cuyos
    elementos se identifican por ``id``. El orden de la lista se conserva.
    """

    @abstractmethod
    async def get_object(self, namespace: str) -> Any | None:
        """Leer el valor guardado en un namespace."""

    @abstractmethod
    async def save_object(self, namespace: str, value: Any) -> None:
        """Reemplazar el valor de un namespace."""

    async def list_in_collection(self, namespace: str) -> list[dict[str, Any]]:
        items = await self.get_object(namespace)
        return list(items or [])

    async def get_in_collection(self, namespace: str, item_id: str) -> dict[str, Any] | None:
        for item in await self.list_in_collection(namespace):
            if item.get("id") == item_id:
                return item
        return None

    async def save_in_collection(self, namespace: str, item: dict[str, Any]) -> None:
        """Insertar o reemplazar por id, conservando la posición."""
        items = await self.list_in_collection(namespace)
        for index, existing in enumerate(items):
            if existing.get("id") == item["id"]:
                items[index] = item
                break
        else:
            items.append(item)
        await self.save_object(namespace, items)

    async def remove_in_collection(self, namespace: str, item_id: str) -> None:
        items = await self.list_in_collection(namespace)
        remaining = [item for item in items if item.get("id") != item_id]
        if len(remaining) != len(items):
            await self.save_object(namespace, remaining)


class InMemoryStorageClient(StorageClient):
    """Almacén en memoria (tests y uso efímero)."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    async def get_object(self, namespace: str) -> Any | None:
        return copy.deepcopy(self._data.get(namespace))

    async def save_object(self, namespace: str, value: Any) -> None:
        self._data[namespace] = copy.deepcopy(value)


class FileStorageClient(StorageClient):
    """Almacén en disco: un fichero JSON por namespace."""

    def __init__(self, base_path: Path) -> None:
        """Inicializar con ruta base."""
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def get_namespace_path(self, namespace: str) -> Path:
        """Obtener ruta del fichero de un namespace."""
        return self.base_path / f"{namespace}.json"

    async def get_object(self, namespace: str) -> Any | None:
        return await asyncio.to_thread(self._read, namespace)

    async def save_object(self, namespace: str, value: Any) -> None:
        await asyncio.to_thread(self._write, namespace, value)

    def _read(self, namespace: str) -> Any | None:
        path = self.get_namespace_path(namespace)
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"No se pudo leer {path}: {e}") from e

    def _write(self, namespace: str, value: Any) -> None:
        path = self.get_namespace_path(namespace)

        # Escritura atómica: fichero temporal + rename
        fd, tmp_name = tempfile.mkstemp(dir=self.base_path, prefix=f".{namespace}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, path)
        except OSError as e:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"No se pudo escribir {path}: {e}") from e

        logger.debug("Namespace %s guardado en %s", namespace, path)
