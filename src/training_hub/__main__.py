"""Punto de entrada principal."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .app import open_repository
from .config import get_config
from .core.result import Degraded


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="training-hub", description="Gestión de módulos de formación")
    parser.add_argument("-v", "--verbose", action="store_true", help="Logging en modo debug")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="Listar módulos visibles")

    export = sub.add_parser("export", help="Exportar módulos a ZIP")
    export.add_argument("ids", nargs="+")
    export.add_argument("-o", "--output", type=Path, required=True)

    imp = sub.add_parser("import", help="Importar módulos desde ZIP")
    imp.add_argument("files", nargs="+", type=Path)

    reset = sub.add_parser("reset", help="Restaurar módulos por defecto")
    reset.add_argument("ids", nargs="+")

    sync = sub.add_parser("sync", help="Sincronizar traducciones de un módulo")
    sync.add_argument("id")

    delete = sub.add_parser("delete", help="Eliminar módulos")
    delete.add_argument("ids", nargs="+")

    return parser


async def run(args: argparse.Namespace) -> int:
    """Ejecutar un comando contra el repositorio."""
    async with open_repository(get_config()) as repository:
        if args.command == "list":
            for module in await repository.list():
                flags = "".join(
                    mark if on else "-"
                    for mark, on in (
                        ("i", module.installed),
                        ("e", module.editable),
                        ("c", module.compatible),
                        ("x", module.progress.completed if module.progress else False),
                    )
                )
                print(f"{module.id:<24} {flags} {module.name.reference_value}")

        elif args.command == "export":
            args.output.write_bytes(await repository.export_modules(args.ids))
            print(f"Exportado: {args.output}")

        elif args.command == "import":
            archives = [path.read_bytes() for path in args.files]
            for module in await repository.import_modules(archives):
                print(f"Importado: {module.id}")

        elif args.command == "reset":
            await repository.reset_default_value(args.ids)

        elif args.command == "sync":
            outcome = await repository.update_translations(args.id)
            if isinstance(outcome, Degraded):
                print(f"Sincronización fallida: {outcome.error}", file=sys.stderr)
                return 1

        elif args.command == "delete":
            await repository.delete(args.ids)

    return 0


def main(argv: list[str] | None = None) -> int:
    """Ejecutar aplicación."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
