"""Cliente HTTP para la API de POEditor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from ..config import get_config


class TranslationProviderError(Exception):
    """Error devuelto por el proveedor de traducciones."""

    pass


@dataclass
class TermTranslation:
    """Traducción de un término en un idioma."""

    term: str
    translation: str


class PoEditorApi:
    """Cliente para API v2 de POEditor.

    Todas las llamadas son POST con formulario (``api_token``, ``id``, ...)
    y devuelven ``{"response": {"status": ...}, "result": {...}}``.
    """

    def __init__(
        self,
        token: str,
        base_url: str | None = None,
        timeout: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Inicializar cliente."""
        if base_url is None or timeout is None:
            config = get_config()
            base_url = base_url or config.poeditor_url
            timeout = timeout or config.http_timeout
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def __aenter__(self) -> PoEditorApi:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _post(self, endpoint: str, **params: Any) -> dict[str, Any]:
        data = {"api_token": self.token, **{k: str(v) for k, v in params.items()}}
        response = await self.client.post(f"{self.base_url}/{endpoint}", data=data)
        response.raise_for_status()
        payload = response.json()

        status = payload.get("response", {})
        if status.get("status") == "fail":
            raise TranslationProviderError(
                f"POEditor {endpoint}: {status.get('code')} {status.get('message', '')}".strip()
            )
        return payload.get("result") or {}

    async def list_languages(self, project_id: int) -> list[str]:
        """Listar códigos de idioma del proyecto."""
        result = await self._post("languages/list", id=project_id)
        return [language["code"] for language in result.get("languages") or []]

    async def list_terms(self, project_id: int, language: str) -> list[TermTranslation]:
        """Listar términos con su traducción en un idioma."""
        result = await self._post("terms/list", id=project_id, language=language)
        terms = []
        for item in result.get("terms") or []:
            content = (item.get("translation") or {}).get("content") or ""
            if isinstance(content, dict):  # términos plurales
                content = content.get("one", "")
            terms.append(TermTranslation(term=item["term"], translation=content))
        return terms

    async def close(self) -> None:
        """Cerrar cliente HTTP."""
        await self.client.aclose()
