"""Permisos y visibilidad de módulos para un usuario."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from .module import NamedRef, PersistedTrainingModule

Permission = Literal["read", "write"]

ALL_AUTHORITY = "ALL"


@dataclass
class UserRole:
    """Rol de usuario con sus autoridades."""

    id: str
    name: str = ""
    authorities: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserRole:
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            authorities=list(data.get("authorities") or []),
        )


@dataclass
class User:
    """Usuario actual."""

    id: str
    name: str
    user_roles: list[UserRole] = field(default_factory=list)
    user_groups: list[NamedRef] = field(default_factory=list)

    @property
    def authorities(self) -> set[str]:
        return {authority for role in self.user_roles for authority in role.authorities}

    @property
    def is_admin(self) -> bool:
        return ALL_AUTHORITY in self.authorities

    def ref(self) -> NamedRef:
        return NamedRef(id=self.id, name=self.name)


def has_authorities(module: PersistedTrainingModule, user: User) -> bool:
    """El usuario tiene todas las autoridades requeridas (o la comodín)."""
    authorities = user.authorities
    if ALL_AUTHORITY in authorities:
        return True
    return all(authority in authorities for authority in module.dhis_authorities)


def _grants(access: str, token: str) -> bool:
    # Solo los dos primeros caracteres (metadata rw) son relevantes
    return token in (access or "")[:2]


def validate_user_permission(
    module: PersistedTrainingModule, permission: Permission, user: User
) -> bool:
    """Evaluar acceso público, por usuario y por grupo."""
    token = "r" if permission == "read" else "w"

    if user.is_admin:
        return True

    if _grants(module.public_access, token):
        return True

    if any(
        entry.id == user.id and _grants(entry.access, token)
        for entry in module.user_accesses
    ):
        return True

    group_ids = {group.id for group in user.user_groups}
    return any(
        entry.id in group_ids and _grants(entry.access, token)
        for entry in module.user_group_accesses
    )


def authorize(module: PersistedTrainingModule, user: User, permission: Permission) -> bool:
    """Autoridades satisfechas y acceso concedido para el permiso pedido."""
    return has_authorities(module, user) and validate_user_permission(module, permission, user)
