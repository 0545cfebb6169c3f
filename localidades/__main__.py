"""
CLI de Localidades API.

Usage:
    python -m localidades serve [--host 0.0.0.0] [--port 8080] [--catalogos ./catalogos]
    python -m localidades seed [--catalogos ./catalogos]
    python -m localidades migrate
    python -m localidades stats
    python -m localidades query <cp>
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


def _aplicar_catalogos(args):
    from localidades.core.config import settings

    if getattr(args, "catalogos", None):
        settings.CATALOGOS_PATH = args.catalogos


def cmd_serve(args):
    """Levantar el servidor HTTP (los catálogos se pueblan en el arranque)."""
    import uvicorn
    from localidades.core.config import settings

    _aplicar_catalogos(args)
    from localidades.main import app

    uvicorn.run(app, host=args.host or settings.IP, port=args.port or settings.PORT)


async def _seed(ruta):
    from localidades.core import database
    from localidades.services.carga_catalogos import poblar_catalogos

    await database.init_db()
    try:
        async with database.AsyncSessionLocal() as session:
            return await poblar_catalogos(session, ruta)
    finally:
        await database.close_db()


def cmd_seed(args):
    """Crear tablas y poblar catálogos."""
    from localidades.core.config import settings
    from localidades.core.exceptions import CargaCatalogoError

    _aplicar_catalogos(args)
    try:
        resumen = asyncio.run(_seed(settings.CATALOGOS_PATH))
    except CargaCatalogoError as e:
        logger.error(str(e))
        sys.exit(1)

    for tabla, insertadas in resumen.items():
        print(f"  {tabla:.<30} {insertadas:>10,} insertados")


def cmd_migrate(args):
    """Aplicar migraciones hasta head."""
    from alembic import command
    from alembic.config import Config

    command.upgrade(Config(str(ALEMBIC_INI)), "head")


async def _stats():
    from localidades.core import database
    from localidades.services.carga_catalogos import estadisticas_catalogos

    await database.init_db()
    try:
        async with database.AsyncSessionLocal() as session:
            return await estadisticas_catalogos(session)
    finally:
        await database.close_db()


def cmd_stats(args):
    """Mostrar registros por catálogo."""
    stats = asyncio.run(_stats())
    print("\n" + "=" * 50)
    print("  Catálogos - Estadísticas")
    print("=" * 50)
    for tabla, total in stats.items():
        print(f"  {tabla:.<30} {total:>10,}")
    print("=" * 50)


async def _query(cp):
    from localidades.core import database
    from localidades.services.busqueda_cp import BusquedaCPService, parsear_cp

    await database.init_db()
    try:
        async with database.AsyncSessionLocal() as session:
            return await BusquedaCPService.buscar(session, parsear_cp(cp))
    finally:
        await database.close_db()


def cmd_query(args):
    """Consultar un código postal."""
    from localidades.core.exceptions import CatalogoError

    try:
        result = asyncio.run(_query(args.cp))
    except CatalogoError as e:
        print(e.mensaje)
        sys.exit(1)

    print(json.dumps(result.model_dump(), ensure_ascii=False, indent=2))


def build_parser():
    parser = argparse.ArgumentParser(
        prog="localidades",
        description="Localidades API - estado, municipio y localidades por código postal",
    )
    subparsers = parser.add_subparsers(dest="command", help="Comando a ejecutar")

    # serve
    sv = subparsers.add_parser("serve", help="Levantar el servidor HTTP")
    sv.add_argument("--host", type=str, default=None, help="Dirección (default: IP)")
    sv.add_argument("--port", type=int, default=None, help="Puerto (default: PORT)")
    sv.add_argument("--catalogos", type=str, default=None, help="Directorio de los CSV de catálogos")

    # seed
    sd = subparsers.add_parser("seed", help="Poblar catálogos desde CSV")
    sd.add_argument("--catalogos", type=str, default=None, help="Directorio de los CSV de catálogos")

    # migrate
    subparsers.add_parser("migrate", help="Aplicar migraciones Alembic")

    # stats
    subparsers.add_parser("stats", help="Registros por catálogo")

    # query
    q = subparsers.add_parser("query", help="Consultar un código postal")
    q.add_argument("cp", type=str, help="Código postal")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    commands = {
        "serve": cmd_serve,
        "seed": cmd_seed,
        "migrate": cmd_migrate,
        "stats": cmd_stats,
        "query": cmd_query,
    }

    commands[args.command](args)


if __name__ == "__main__":
    main()
