"""Cliente HTTP para los assets empaquetados (módulos por defecto)."""

from __future__ import annotations

import httpx

from ..config import get_config


class AssetClient:
    """Descarga ficheros binarios desde el servidor de assets."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Inicializar cliente."""
        if base_url is None or timeout is None:
            config = get_config()
            base_url = base_url or config.assets_url
            timeout = timeout or config.http_timeout
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def get_bytes(self, path: str) -> bytes:
        """GET de un asset binario."""
        response = await self.client.get(f"{self.base_url}/{path.lstrip('/')}")
        response.raise_for_status()
        return response.content

    async def get_module_archive(self, module_id: str) -> bytes:
        """Descargar el zip empaquetado de un módulo por defecto."""
        return await self.get_bytes(f"modules/{module_id}.zip")

    async def close(self) -> None:
        """Cerrar cliente HTTP."""
        await self.client.aclose()
