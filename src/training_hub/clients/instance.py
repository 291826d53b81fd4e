"""Contexto de instancia e identidad (DHIS2)."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from ..config import get_config
from ..core.module import NamedRef
from ..core.permissions import User, UserRole

logger = logging.getLogger(__name__)


class InstanceContext(ABC):
    """Información de la instancia destino."""

    @abstractmethod
    async def get_version(self) -> str:
        """Versión de la instancia, p.ej. "2.36.4"."""

    @abstractmethod
    async def is_app_installed_by_url(self, launch_url: str) -> bool:
        """Indica si la app enlazada está instalada."""


class IdentityContext(ABC):
    """Usuario autenticado."""

    @abstractmethod
    async def get_current_user(self) -> User:
        """Obtener usuario actual con roles y grupos."""


def parse_user(data: dict[str, Any]) -> User:
    """Construir usuario desde la respuesta de /api/me."""
    roles = data.get("userRoles")
    if roles is None:
        roles = (data.get("userCredentials") or {}).get("userRoles") or []
    return User(
        id=data["id"],
        name=data.get("name", data.get("displayName", "")),
        user_roles=[UserRole.from_dict(role) for role in roles],
        user_groups=[NamedRef.from_dict(group) for group in data.get("userGroups") or []],
    )


class DhisInstance(InstanceContext, IdentityContext):
    """Cliente para la API web de DHIS2."""

    ME_FIELDS = (
        "id,name,userGroups[id,name],"
        "userRoles[id,name,authorities],"
        "userCredentials[userRoles[id,name,authorities]]"
    )

    def __init__(
        self,
        base_url: str | None = None,
        auth: tuple[str, str] | None = None,
        timeout: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Inicializar cliente."""
        if base_url is None or auth is None or timeout is None:
            config = get_config()
            base_url = base_url or config.instance_url
            auth = auth or (config.instance_user, config.instance_password)
            timeout = timeout or config.http_timeout
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            auth=auth,
            timeout=timeout,
            transport=transport,
        )

    async def get_version(self) -> str:
        response = await self.client.get("/api/system/info")
        response.raise_for_status()
        return response.json().get("version", "")

    async def is_app_installed_by_url(self, launch_url: str) -> bool:
        if not launch_url:
            return False

        try:
            response = await self.client.get(launch_url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.debug("App no disponible en %s: %s", launch_url, e)
            return False
        return True

    async def get_current_user(self) -> User:
        response = await self.client.get("/api/me", params={"fields": self.ME_FIELDS})
        response.raise_for_status()
        return parse_user(response.json())

    async def close(self) -> None:
        """Cerrar cliente HTTP."""
        await self.client.aclose()
