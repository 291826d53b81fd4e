"""Modelos de datos para módulos de formación."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Iterator

SCHEMA_VERSION = 1

MODULE_TYPES = ("app", "core", "widget")
DEFAULT_MODULE_TYPE = "app"

PROVIDER_NONE = "NONE"
PROVIDER_POEDITOR = "poeditor"

DEFAULT_PUBLIC_ACCESS = "--------"
OWNER_ACCESS = "rw------"


def now_iso() -> str:
    """Timestamp actual en ISO-8601 (UTC)."""
    return datetime.now(timezone.utc).isoformat()


def parse_timestamp(value: str | None) -> datetime | None:
    """Parsear timestamp ISO-8601, aceptando el sufijo Z."""
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def is_valid_training_type(value: str | None) -> bool:
    """Verificar si el tipo de módulo es conocido."""
    return value in MODULE_TYPES


@dataclass
class TranslatableText:
    """Texto localizable identificado por una clave de término."""

    key: str
    reference_value: str = ""
    translations: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convertir a diccionario."""
        return {
            "key": self.key,
            "referenceValue": self.reference_value,
            "translations": dict(self.translations),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TranslatableText:
        """Crear desde diccionario."""
        return cls(
            key=data["key"],
            reference_value=data.get("referenceValue", ""),
            translations=dict(data.get("translations") or {}),
        )


@dataclass
class ModuleStep:
    """Un paso del módulo con sus páginas."""

    title: TranslatableText
    subtitle: TranslatableText | None = None
    pages: list[TranslatableText] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convertir a diccionario."""
        data: dict[str, Any] = {"title": self.title.to_dict()}
        if self.subtitle is not None:
            data["subtitle"] = self.subtitle.to_dict()
        data["pages"] = [page.to_dict() for page in self.pages]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ModuleStep:
        """Crear desde diccionario."""
        subtitle = data.get("subtitle")
        return cls(
            title=TranslatableText.from_dict(data["title"]),
            subtitle=TranslatableText.from_dict(subtitle) if subtitle else None,
            pages=[TranslatableText.from_dict(page) for page in data.get("pages", [])],
        )


@dataclass
class ModuleContents:
    """Contenido del módulo: bienvenida y pasos."""

    welcome: TranslatableText
    steps: list[ModuleStep] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convertir a diccionario."""
        return {
            "welcome": self.welcome.to_dict(),
            "steps": [step.to_dict() for step in self.steps],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ModuleContents:
        """Crear desde diccionario."""
        return cls(
            welcome=TranslatableText.from_dict(data["welcome"]),
            steps=[ModuleStep.from_dict(step) for step in data.get("steps", [])],
        )


@dataclass
class TranslationConnection:
    """Configuración del proveedor de traducciones."""

    provider: str = PROVIDER_NONE  # NONE, poeditor
    project: str = ""

    @property
    def active(self) -> bool:
        return self.provider == PROVIDER_POEDITOR

    def to_dict(self) -> dict[str, Any]:
        return {"provider": self.provider, "project": self.project}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> TranslationConnection:
        data = data or {}
        return cls(
            provider=data.get("provider", PROVIDER_NONE),
            project=str(data.get("project", "")),
        )


@dataclass
class NamedRef:
    """Referencia a un usuario o grupo."""

    id: str
    name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NamedRef:
        return cls(id=data["id"], name=data.get("name", ""))


@dataclass
class AccessEntry:
    """Entrada de control de acceso (usuario o grupo)."""

    id: str
    access: str = DEFAULT_PUBLIC_ACCESS
    name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "access": self.access}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AccessEntry:
        return cls(
            id=data["id"],
            access=data.get("access", DEFAULT_PUBLIC_ACCESS),
            name=data.get("name", ""),
        )


@dataclass
class PersistedTrainingModule:
    """Forma almacenada de un módulo de formación."""

    id: str
    name: TranslatableText
    contents: ModuleContents
    version: int | None = SCHEMA_VERSION
    icon: str = ""
    type: str = DEFAULT_MODULE_TYPE
    disabled: bool = False
    translation: TranslationConnection = field(default_factory=TranslationConnection)
    last_translation_sync: str = ""
    revision: int = 1
    dhis_version_range: str = ""
    dhis_app_key: str = ""
    dhis_launch_url: str = ""
    dhis_authorities: list[str] = field(default_factory=list)
    public_access: str = DEFAULT_PUBLIC_ACCESS
    user_accesses: list[AccessEntry] = field(default_factory=list)
    user_group_accesses: list[AccessEntry] = field(default_factory=list)
    user: NamedRef | None = None
    last_updated_by: NamedRef | None = None
    created: str = ""
    last_updated: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convertir a diccionario (formato de almacenamiento)."""
        return {
            "_version": self.version,
            "id": self.id,
            "name": self.name.to_dict(),
            "icon": self.icon,
            "type": self.type,
            "disabled": self.disabled,
            "contents": self.contents.to_dict(),
            "translation": self.translation.to_dict(),
            "lastTranslationSync": self.last_translation_sync,
            "revision": self.revision,
            "dhisVersionRange": self.dhis_version_range,
            "dhisAppKey": self.dhis_app_key,
            "dhisLaunchUrl": self.dhis_launch_url,
            "dhisAuthorities": list(self.dhis_authorities),
            "publicAccess": self.public_access,
            "userAccesses": [entry.to_dict() for entry in self.user_accesses],
            "userGroupAccesses": [entry.to_dict() for entry in self.user_group_accesses],
            "user": self.user.to_dict() if self.user else None,
            "lastUpdatedBy": self.last_updated_by.to_dict() if self.last_updated_by else None,
            "created": self.created,
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PersistedTrainingModule:
        """Crear desde diccionario.

        La versión se conserva tal cual; la validación ocurre al construir
        el modelo de dominio.
        """
        user = data.get("user")
        last_updated_by = data.get("lastUpdatedBy")
        return cls(
            version=data.get("_version"),
            id=data["id"],
            name=TranslatableText.from_dict(data["name"]),
            icon=data.get("icon", ""),
            type=data.get("type", DEFAULT_MODULE_TYPE),
            disabled=bool(data.get("disabled", False)),
            contents=ModuleContents.from_dict(data["contents"]),
            translation=TranslationConnection.from_dict(data.get("translation")),
            last_translation_sync=data.get("lastTranslationSync", ""),
            revision=data.get("revision", 1),
            dhis_version_range=data.get("dhisVersionRange", ""),
            dhis_app_key=data.get("dhisAppKey", ""),
            dhis_launch_url=data.get("dhisLaunchUrl", ""),
            dhis_authorities=list(data.get("dhisAuthorities") or []),
            public_access=data.get("publicAccess", DEFAULT_PUBLIC_ACCESS),
            user_accesses=[AccessEntry.from_dict(e) for e in data.get("userAccesses") or []],
            user_group_accesses=[
                AccessEntry.from_dict(e) for e in data.get("userGroupAccesses") or []
            ],
            user=NamedRef.from_dict(user) if user else None,
            last_updated_by=NamedRef.from_dict(last_updated_by) if last_updated_by else None,
            created=data.get("created", ""),
            last_updated=data.get("lastUpdated", ""),
        )

    def iter_texts(self) -> Iterator[TranslatableText]:
        """Recorrer todos los nodos de texto localizables."""
        yield self.name
        yield self.contents.welcome
        for step in self.contents.steps:
            yield step.title
            if step.subtitle is not None:
                yield step.subtitle
            yield from step.pages


def default_training_module() -> PersistedTrainingModule:
    """Forma canónica de un módulo vacío."""
    return PersistedTrainingModule(
        id="",
        name=TranslatableText(key="module-name"),
        contents=ModuleContents(welcome=TranslatableText(key="module-welcome")),
    )


def update_translation(
    module: PersistedTrainingModule, key: str, value: str
) -> PersistedTrainingModule:
    """Devolver copia del módulo con el valor de referencia de `key` reemplazado."""
    updated = copy.deepcopy(module)
    for text in updated.iter_texts():
        if text.key == key:
            text.reference_value = value
    return updated


# Modelo de dominio (derivado, nunca se persiste)


@dataclass
class ModulePage(TranslatableText):
    """Página con id sintético."""

    id: str = ""


@dataclass
class StepModel:
    """Paso con ids sintéticos."""

    id: str
    title: TranslatableText
    subtitle: TranslatableText | None = None
    pages: list[ModulePage] = field(default_factory=list)


@dataclass
class ContentsModel:
    welcome: TranslatableText
    steps: list[StepModel] = field(default_factory=list)


@dataclass
class TrainingModule:
    """Módulo listo para presentar al usuario actual."""

    id: str
    name: TranslatableText
    icon: str
    type: str
    disabled: bool
    contents: ContentsModel
    translation: TranslationConnection
    last_translation_sync: str
    revision: int
    dhis_version_range: str
    dhis_app_key: str
    dhis_launch_url: str
    dhis_authorities: list[str]
    public_access: str
    user_accesses: list[AccessEntry]
    user_group_accesses: list[AccessEntry]
    user: NamedRef | None
    last_updated_by: NamedRef | None
    created: datetime | None
    last_updated: datetime | None
    installed: bool = False
    editable: bool = False
    compatible: bool = False
    progress: UserProgress | None = None

    def with_progress(self, progress: UserProgress) -> TrainingModule:
        return replace(self, progress=progress)


@dataclass
class ModulePatch:
    """Cambios explícitos sobre la forma canónica de un módulo.

    Precedencia al construir el registro: forma canónica por defecto y luego
    los campos no nulos del parche. La autoría (``user``/``created``) no forma
    parte del parche: se conserva la del registro almacenado o, si no existe,
    se estampa al guardar.
    """

    id: str
    name: TranslatableText
    icon: str | None = None
    type: str | None = None
    disabled: bool | None = None
    contents: ModuleContents | None = None
    translation: TranslationConnection | None = None
    last_translation_sync: str | None = None
    revision: int | None = None
    dhis_version_range: str | None = None
    dhis_app_key: str | None = None
    dhis_launch_url: str | None = None
    dhis_authorities: list[str] | None = None
    public_access: str | None = None
    user_accesses: list[AccessEntry] | None = None
    user_group_accesses: list[AccessEntry] | None = None

    def apply(self, base: PersistedTrainingModule) -> PersistedTrainingModule:
        """Aplicar los campos explícitos sobre `base`."""
        changes = {
            name: value
            for name, value in vars(self).items()
            if value is not None
        }
        return replace(copy.deepcopy(base), **copy.deepcopy(changes))

    @classmethod
    def from_module(cls, module: TrainingModule) -> ModulePatch:
        """Crear un parche completo a partir de un modelo de dominio."""
        return cls(
            id=module.id,
            name=module.name,
            icon=module.icon,
            type=module.type,
            disabled=module.disabled,
            contents=ModuleContents(
                welcome=module.contents.welcome,
                steps=[
                    ModuleStep(
                        title=step.title,
                        subtitle=step.subtitle,
                        pages=[
                            TranslatableText(
                                key=page.key,
                                reference_value=page.reference_value,
                                translations=dict(page.translations),
                            )
                            for page in step.pages
                        ],
                    )
                    for step in module.contents.steps
                ],
            ),
            translation=module.translation,
            last_translation_sync=module.last_translation_sync,
            revision=module.revision,
            dhis_version_range=module.dhis_version_range,
            dhis_app_key=module.dhis_app_key,
            dhis_launch_url=module.dhis_launch_url,
            dhis_authorities=module.dhis_authorities,
            public_access=module.public_access,
            user_accesses=module.user_accesses,
            user_group_accesses=module.user_group_accesses,
        )


@dataclass
class ModuleBuilder:
    """Datos mínimos para crear o editar un módulo."""

    id: str
    name: str
    title: str
    description: str

    def welcome_text(self) -> str:
        return f"# {self.title}\n\n{self.description}"


from .progress import UserProgress  # noqa: E402
