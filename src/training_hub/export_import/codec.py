"""Codificación de módulos en archivos ZIP portables."""

from __future__ import annotations

import hashlib
import io
import json
import zipfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable

import yaml


@dataclass
class ExportManifest:
    """Manifiesto de exportación."""

    version: str = "1.0.0"
    export_date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    modules: list[str] = field(default_factory=list)
    checksums: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convertir a diccionario."""
        return {
            "version": self.version,
            "export_date": self.export_date.isoformat(),
            "modules": self.modules,
            "checksums": self.checksums,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExportManifest:
        """Crear desde diccionario."""
        return cls(
            version=data.get("version", "1.0.0"),
            export_date=datetime.fromisoformat(data["export_date"]),
            modules=list(data.get("modules", [])),
            checksums=data.get("checksums", {}),
        )


class ArchiveError(Exception):
    """Error en operación de export/import."""

    pass


class ZipArchiveCodec:
    """Serializa registros de módulos en un ZIP y viceversa.

    Estructura del archivo::

        manifest.json
        <id>/module.yaml
    """

    MANIFEST_FILENAME = "manifest.json"
    MODULE_FILENAME = "module.yaml"

    def encode(self, records: Iterable[dict[str, Any] | None]) -> bytes:
        """Crear un ZIP con los registros. Los huecos (None) se omiten."""
        manifest = ExportManifest()
        files: list[tuple[str, bytes]] = []

        for record in records:
            if record is None:
                continue

            module_id = record["id"]
            zip_path = f"{module_id}/{self.MODULE_FILENAME}"
            content = yaml.safe_dump(
                record,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
            ).encode("utf-8")

            files.append((zip_path, content))
            manifest.modules.append(module_id)
            manifest.checksums[zip_path] = hashlib.md5(content).hexdigest()

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
            manifest_data = json.dumps(manifest.to_dict(), indent=2, ensure_ascii=False)
            zf.writestr(self.MANIFEST_FILENAME, manifest_data)

            for zip_path, content in files:
                zf.writestr(zip_path, content)

        return buffer.getvalue()

    def decode(self, archives: Iterable[bytes]) -> list[dict[str, Any]]:
        """Leer todos los registros de uno o varios ZIP."""
        records: list[dict[str, Any]] = []
        for archive in archives:
            records.extend(self._decode_one(archive))
        return records

    def _decode_one(self, archive: bytes) -> list[dict[str, Any]]:
        try:
            zf = zipfile.ZipFile(io.BytesIO(archive), "r")
        except zipfile.BadZipFile as e:
            raise ArchiveError("Archivo ZIP corrupto") from e

        with zf:
            names = set(zf.namelist())
            if self.MANIFEST_FILENAME not in names:
                raise ArchiveError("No se encontró manifest.json en el ZIP")

            # Leer manifest
            try:
                manifest = ExportManifest.from_dict(json.loads(zf.read(self.MANIFEST_FILENAME)))
            except (json.JSONDecodeError, KeyError, ValueError) as e:
                raise ArchiveError(f"Manifest inválido: {e}") from e

            records = []
            for module_id in manifest.modules:
                zip_path = f"{module_id}/{self.MODULE_FILENAME}"
                if zip_path not in names:
                    raise ArchiveError(f"Archivo faltante: {zip_path}")

                content = zf.read(zip_path)

                # Validar checksum si existe
                expected_checksum = manifest.checksums.get(zip_path)
                if expected_checksum:
                    actual_checksum = hashlib.md5(content).hexdigest()
                    if actual_checksum != expected_checksum:
                        raise ArchiveError(
                            f"Checksum inválido para {zip_path}: "
                            f"esperado {expected_checksum[:8]}..., "
                            f"obtenido {actual_checksum[:8]}..."
                        )

                try:
                    record = yaml.safe_load(content)
                except yaml.YAMLError as e:
                    raise ArchiveError(f"Módulo inválido {zip_path}: {e}") from e

                if not isinstance(record, dict) or record.get("id") != module_id:
                    raise ArchiveError(f"Módulo inválido {zip_path}")
                records.append(record)

            return records
