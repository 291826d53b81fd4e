"""Export/import de módulos en ZIP."""

from .codec import ArchiveError, ExportManifest, ZipArchiveCodec

__all__ = ["ArchiveError", "ExportManifest", "ZipArchiveCodec"]
