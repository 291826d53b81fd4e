"""Tests para clientes HTTP."""

import asyncio
from urllib.parse import parse_qs

import httpx
import pytest

from training_hub.clients.assets import AssetClient
from training_hub.clients.instance import DhisInstance, parse_user
from training_hub.clients.poeditor import PoEditorApi, TranslationProviderError


def poeditor(handler) -> PoEditorApi:
    return PoEditorApi(
        "tok",
        base_url="https://poeditor.test/v2",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


class TestPoEditorApi:
    """Tests para el cliente de POEditor."""

    def test_list_languages(self) -> None:
        """Test listado de idiomas del proyecto."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["form"] = parse_qs(request.content.decode())
            return httpx.Response(
                200,
                json={
                    "response": {"status": "success"},
                    "result": {"languages": [{"code": "en"}, {"code": "es"}]},
                },
            )

        languages = asyncio.run(poeditor(handler).list_languages(42))

        assert languages == ["en", "es"]
        assert seen["path"] == "/v2/languages/list"
        assert seen["form"] == {"api_token": ["tok"], "id": ["42"]}

    def test_list_terms(self) -> None:
        """Test términos traducidos, plural toma "one"."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "response": {"status": "success"},
                    "result": {
                        "terms": [
                            {"term": "t1", "translation": {"content": "Hola"}},
                            {"term": "t2", "translation": {"content": ""}},
                            {"term": "t3", "translation": {"content": {"one": "uno", "other": "varios"}}},
                        ]
                    },
                },
            )

        terms = asyncio.run(poeditor(handler).list_terms(42, "es"))

        assert [(t.term, t.translation) for t in terms] == [("t1", "Hola"), ("t2", ""), ("t3", "uno")]

    def test_failed_response_raises(self) -> None:
        """Test respuesta "fail" de la API."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"response": {"status": "fail", "code": "4011", "message": "Invalid API Token"}},
            )

        with pytest.raises(TranslationProviderError, match="4011"):
            asyncio.run(poeditor(handler).list_languages(1))

    def test_http_error_raises(self) -> None:
        """Test error HTTP propagado."""
        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(poeditor(lambda request: httpx.Response(500)).list_languages(1))

    def test_context_manager_closes_client(self) -> None:
        """Test cierre del cliente al salir."""
        api = poeditor(lambda request: httpx.Response(200, json={}))

        async def scenario():
            async with api:
                pass

        asyncio.run(scenario())
        assert api.client.is_closed


class TestDhisInstance:
    """Tests para el cliente de la instancia."""

    def make(self, handler) -> DhisInstance:
        return DhisInstance(
            base_url="http://dhis.test",
            auth=("admin", "district"),
            timeout=5,
            transport=httpx.MockTransport(handler),
        )

    def test_get_version(self) -> None:
        """Test versión de la instancia."""
        instance = self.make(lambda request: httpx.Response(200, json={"version": "2.36.4"}))
        assert asyncio.run(instance.get_version()) == "2.36.4"

    def test_is_app_installed(self) -> None:
        """Test detección de app instalada."""
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/api/apps/maps/index.html":
                return httpx.Response(200, text="<html>")
            return httpx.Response(404)

        instance = self.make(handler)

        assert asyncio.run(instance.is_app_installed_by_url("/api/apps/maps/index.html"))
        assert not asyncio.run(instance.is_app_installed_by_url("/api/apps/none/index.html"))
        assert not asyncio.run(instance.is_app_installed_by_url(""))

    def test_get_current_user(self) -> None:
        """Test usuario actual con roles y grupos."""
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/me"
            assert "userGroups" in request.url.params["fields"]
            return httpx.Response(
                200,
                json={
                    "id": "u1",
                    "name": "Jane",
                    "userGroups": [{"id": "g1", "name": "Trainers"}],
                    "userCredentials": {
                        "userRoles": [{"id": "r1", "name": "Role", "authorities": ["F_A", "ALL"]}]
                    },
                },
            )

        user = asyncio.run(self.make(handler).get_current_user())

        assert user.id == "u1"
        assert user.is_admin
        assert [group.id for group in user.user_groups] == ["g1"]

    def test_parse_user_prefers_top_level_roles(self) -> None:
        """Test roles de primer nivel frente a userCredentials."""
        user = parse_user(
            {
                "id": "u1",
                "displayName": "Jane",
                "userRoles": [{"id": "r1", "authorities": ["F_B"]}],
                "userCredentials": {"userRoles": [{"id": "r2", "authorities": ["F_OLD"]}]},
            }
        )

        assert user.name == "Jane"
        assert user.authorities == {"F_B"}


class TestAssetClient:
    """Tests para el cliente de assets."""

    def test_get_module_archive(self) -> None:
        """Test descarga del zip de un módulo."""
        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == "http://assets.test/app/modules/maps.zip":
                return httpx.Response(200, content=b"PK")
            return httpx.Response(404)

        client = AssetClient(
            base_url="http://assets.test/app/",
            timeout=5,
            transport=httpx.MockTransport(handler),
        )

        assert asyncio.run(client.get_module_archive("maps")) == b"PK"
        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(client.get_module_archive("other"))
