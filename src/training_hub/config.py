"""Configuración global de la aplicación."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_data_dir

DEFAULT_MODULES = (
    "dashboards",
    "data-entry",
    "event-capture",
    "event-visualizer",
    "data-visualizer",
    "pivot-tables",
    "maps",
    "bulk-load",
    "tracker-capture",
)


def _split_ids(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Config:
    """Configuración inmutable de la aplicación."""

    # Instancia DHIS2
    instance_url: str = "http://localhost:8080"
    instance_user: str = "admin"
    instance_password: str = "district"

    # Módulos por defecto (assets empaquetados)
    assets_url: str = "http://localhost:8080"
    default_modules: tuple[str, ...] = DEFAULT_MODULES

    # POEditor
    poeditor_url: str = "https://api.poeditor.com/v2"
    poeditor_token: str | None = None

    # HTTP
    http_timeout: int = 30
    max_concurrency: int = 4

    # Paths
    data_dir: Path = Path(user_data_dir("training-hub", "training-hub"))
    store_dir: Path = field(init=False)
    progress_dir: Path = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "store_dir", self.data_dir / "store")
        object.__setattr__(self, "progress_dir", self.data_dir / "user")

    @classmethod
    def from_env(cls) -> Config:
        """Crear configuración desde variables de entorno."""
        data_dir = os.getenv("TRAINING_HUB_DATA_DIR")
        default_modules = os.getenv("TRAINING_HUB_DEFAULT_MODULES")
        instance_url = os.getenv("TRAINING_HUB_INSTANCE_URL", "http://localhost:8080")

        return cls(
            instance_url=instance_url,
            instance_user=os.getenv("TRAINING_HUB_INSTANCE_USER", "admin"),
            instance_password=os.getenv("TRAINING_HUB_INSTANCE_PASSWORD", "district"),
            assets_url=os.getenv("TRAINING_HUB_ASSETS_URL", instance_url),
            default_modules=(
                _split_ids(default_modules) if default_modules is not None else DEFAULT_MODULES
            ),
            poeditor_url=os.getenv("POEDITOR_URL", "https://api.poeditor.com/v2"),
            poeditor_token=os.getenv("POEDITOR_TOKEN") or None,
            http_timeout=int(os.getenv("TRAINING_HUB_HTTP_TIMEOUT", "30")),
            max_concurrency=int(os.getenv("TRAINING_HUB_MAX_CONCURRENCY", "4")),
            data_dir=Path(data_dir) if data_dir else Path(user_data_dir("training-hub", "training-hub")),
        )

    def ensure_dirs(self) -> None:
        """Crear directorios necesarios si no existen."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.store_dir.mkdir(parents=True, exist_ok=True)
        self.progress_dir.mkdir(parents=True, exist_ok=True)


# Instancia global
_config: Config | None = None


def get_config() -> Config:
    """Obtener instancia de configuración (singleton)."""
    global _config
    if _config is None:
        _config = Config.from_env()
        _config.ensure_dirs()
    return _config


def set_config(config: Config) -> None:
    """Establecer configuración (para tests)."""
    global _config
    _config = config
    _config.ensure_dirs()
