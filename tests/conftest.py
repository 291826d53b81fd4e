"""Fixtures compartidos para tests."""

from __future__ import annotations

import asyncio
from typing import Any, Iterable

import httpx
import pytest

from training_hub.clients.assets import AssetClient
from training_hub.clients.instance import IdentityContext, InstanceContext
from training_hub.core.module import NamedRef
from training_hub.core.permissions import User, UserRole
from training_hub.export_import.codec import ZipArchiveCodec
from training_hub.repository.modules import TrainingModuleRepository
from training_hub.storage.client import InMemoryStorageClient, Namespaces


def text(key: str, value: str = "", translations: dict[str, str] | None = None) -> dict[str, Any]:
    return {"key": key, "referenceValue": value, "translations": translations or {}}


def make_record(module_id: str, steps: int = 1, pages: int = 1, **overrides: Any) -> dict[str, Any]:
    """Registro almacenado válido con `steps` pasos de `pages` páginas."""
    record = {
        "_version": 1,
        "id": module_id,
        "name": text(f"{module_id}-name", module_id.title()),
        "icon": "",
        "type": "app",
        "disabled": False,
        "contents": {
            "welcome": text(f"{module_id}-welcome", "Welcome"),
            "steps": [
                {
                    "title": text(f"{module_id}-step-{i}-title", f"Step {i}"),
                    "pages": [
                        text(f"{module_id}-page-{i}-{j}", f"Page {i}.{j}") for j in range(pages)
                    ],
                }
                for i in range(steps)
            ],
        },
        "translation": {"provider": "NONE", "project": ""},
        "lastTranslationSync": "2020-01-01T00:00:00.000Z",
        "revision": 1,
        "dhisVersionRange": "",
        "dhisAppKey": "",
        "dhisLaunchUrl": "",
        "dhisAuthorities": [],
        "publicAccess": "r-------",
        "userAccesses": [],
        "userGroupAccesses": [],
        "user": {"id": "author", "name": "Author"},
        "lastUpdatedBy": {"id": "author", "name": "Author"},
        "created": "2020-01-01T00:00:00.000Z",
        "lastUpdated": "2020-01-01T00:00:00.000Z",
    }
    record.update(overrides)
    return record


class FakeIdentity(IdentityContext):
    def __init__(self, user: User) -> None:
        self.user = user

    async def get_current_user(self) -> User:
        return self.user


class FakeInstance(InstanceContext):
    def __init__(self, version: str = "2.36.0", installed_urls: Iterable[str] = ()) -> None:
        self.version = version
        self.installed_urls = set(installed_urls)

    async def get_version(self) -> str:
        return self.version

    async def is_app_installed_by_url(self, launch_url: str) -> bool:
        return launch_url in self.installed_urls


class AssetServer:
    """Servidor de assets falso sobre httpx.MockTransport."""

    def __init__(self, archives: dict[str, bytes] | None = None, delay: float = 0) -> None:
        self.archives = dict(archives or {})
        self.delay = delay
        self.requests: list[str] = []
        self.in_flight = 0
        self.peak = 0

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request.url.path)
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1

        name = request.url.path.rsplit("/", 1)[-1]
        module_id = name[: -len(".zip")] if name.endswith(".zip") else name
        if module_id in self.archives:
            return httpx.Response(200, content=self.archives[module_id])
        return httpx.Response(404)

    def client(self) -> AssetClient:
        return AssetClient(
            base_url="http://assets.test",
            timeout=5,
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def user() -> User:
    return User(
        id="u1",
        name="Jane",
        user_roles=[UserRole(id="r1", authorities=["M_dhis-web-dashboard"])],
        user_groups=[NamedRef(id="g1", name="Trainers")],
    )


@pytest.fixture
def admin() -> User:
    return User(id="admin", name="Admin", user_roles=[UserRole(id="su", authorities=["ALL"])])


@pytest.fixture
def codec() -> ZipArchiveCodec:
    return ZipArchiveCodec()


@pytest.fixture
def make_repository(user: User, codec: ZipArchiveCodec):
    """Fábrica de repositorios en memoria."""

    def factory(
        records: list[dict[str, Any]] | None = None,
        defaults: dict[str, dict[str, Any]] | None = None,
        current_user: User | None = None,
        instance: InstanceContext | None = None,
        progress: list[dict[str, Any]] | None = None,
        asset_delay: float = 0,
        **kwargs: Any,
    ) -> tuple[TrainingModuleRepository, AssetServer]:
        server = AssetServer(
            {module_id: codec.encode([record]) for module_id, record in (defaults or {}).items()},
            delay=asset_delay,
        )
        storage = InMemoryStorageClient(
            {Namespaces.TRAINING_MODULES: records} if records is not None else None
        )
        current_user = current_user or user
        progress_storage = InMemoryStorageClient(
            {Namespaces.user_progress(current_user.id): progress} if progress is not None else None
        )
        repository = TrainingModuleRepository(
            storage=storage,
            progress_storage=progress_storage,
            identity=FakeIdentity(current_user),
            instance=instance or FakeInstance(),
            assets=server.client(),
            codec=codec,
            default_modules=kwargs.pop("default_modules", list((defaults or {}).keys())),
            **kwargs,
        )
        return repository, server

    return factory
