"""Construcción del modelo de dominio a partir del registro almacenado."""

from __future__ import annotations

from ..clients.instance import InstanceContext
from ..core.module import (
    DEFAULT_MODULE_TYPE,
    SCHEMA_VERSION,
    ContentsModel,
    ModulePage,
    PersistedTrainingModule,
    StepModel,
    TrainingModule,
    is_valid_training_type,
    parse_timestamp,
)
from ..core.permissions import User, authorize
from ..core.versions import is_version_compatible


class UnsupportedVersionError(Exception):
    """Versión de esquema del módulo no soportada."""

    pass


def build_contents(module: PersistedTrainingModule) -> ContentsModel:
    """Asignar ids sintéticos a pasos y páginas según su posición."""
    steps = []
    for step_idx, step in enumerate(module.contents.steps):
        pages = [
            ModulePage(
                key=page.key,
                reference_value=page.reference_value,
                translations=dict(page.translations),
                id=f"{module.id}-page-{step_idx}-{page_idx}",
            )
            for page_idx, page in enumerate(step.pages)
        ]
        steps.append(
            StepModel(
                id=f"{module.id}-step-{step_idx}",
                title=step.title,
                subtitle=step.subtitle,
                pages=pages,
            )
        )
    return ContentsModel(welcome=module.contents.welcome, steps=steps)


class DomainModelBuilder:
    """Decora registros con campos derivados para el usuario actual."""

    def __init__(self, instance: InstanceContext) -> None:
        self.instance = instance

    async def build(
        self,
        module: PersistedTrainingModule,
        user: User,
        instance_version: str,
    ) -> TrainingModule:
        """Construir el modelo de dominio.

        Lanza UnsupportedVersionError si la versión de esquema no es la
        soportada; el error no se absorbe aquí.
        """
        if module.version != SCHEMA_VERSION:
            raise UnsupportedVersionError(f"Unsupported revision of module: {module.version}")

        installed = await self.instance.is_app_installed_by_url(module.dhis_launch_url)

        return TrainingModule(
            id=module.id,
            name=module.name,
            icon=module.icon,
            type=module.type if is_valid_training_type(module.type) else DEFAULT_MODULE_TYPE,
            disabled=module.disabled,
            contents=build_contents(module),
            translation=module.translation,
            last_translation_sync=module.last_translation_sync,
            revision=module.revision,
            dhis_version_range=module.dhis_version_range,
            dhis_app_key=module.dhis_app_key,
            dhis_launch_url=module.dhis_launch_url,
            dhis_authorities=list(module.dhis_authorities),
            public_access=module.public_access,
            user_accesses=list(module.user_accesses),
            user_group_accesses=list(module.user_group_accesses),
            user=module.user,
            last_updated_by=module.last_updated_by,
            created=parse_timestamp(module.created),
            last_updated=parse_timestamp(module.last_updated),
            installed=installed,
            editable=authorize(module, user, "write"),
            compatible=is_version_compatible(module.dhis_version_range, instance_version),
        )
