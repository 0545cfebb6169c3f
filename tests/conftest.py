# tests/conftest.py
"""
Fixtures compartidas: base SQLite temporal (aiosqlite), CSV de catálogos
escritos en tmp_path y cliente httpx contra la app ASGI.
"""
from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, Sequence

import pytest
from httpx import AsyncClient, ASGITransport

from localidades.core import database
from localidades.main import app

AUTH = {"Authorization": "Bearer token-de-prueba"}

ENCABEZADOS = {
    "cat_estados": ["id_estado", "estado"],
    "cat_municipios": ["id_municipio", "municipio", "id_estado"],
    "cat_codigos_postales": ["cp", "id_municipio", "id_estado"],
    "cat_localidades": ["id_localidad", "localidad", "cp", "id_municipio", "id_estado"],
}

# Escenario Querétaro: un estado, un municipio, un CP, una localidad
QUERETARO = {
    "cat_estados": [(9, "Querétaro")],
    "cat_municipios": [(22, "Querétaro", 9)],
    "cat_codigos_postales": [(76000, 22, 9)],
    "cat_localidades": [(1, "Centro", 76000, 22, 9)],
}


def escribir_csv(directorio: Path, catalogo: str, filas: Iterable[Sequence], encabezado=None) -> Path:
    path = directorio / f"{catalogo}.csv"
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(encabezado or ENCABEZADOS[catalogo])
        writer.writerows(filas)
    return path


def escribir_catalogos(directorio: Path, datos: dict) -> Path:
    directorio.mkdir(parents=True, exist_ok=True)
    for catalogo in ENCABEZADOS:
        escribir_csv(directorio, catalogo, datos.get(catalogo, []))
    return directorio


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'catalogos.db'}"


@pytest.fixture
def catalogos_queretaro(tmp_path) -> Path:
    return escribir_catalogos(tmp_path / "catalogos", QUERETARO)


@pytest.fixture
async def base(db_url):
    await database.init_db(db_url)
    yield database
    await database.close_db()


@pytest.fixture
async def session(base):
    async with database.AsyncSessionLocal() as s:
        yield s


@pytest.fixture
async def client(base):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


class _Resultado:
    def __init__(self, filas):
        self._filas = list(filas)

    def scalars(self):
        return self

    def all(self):
        return self._filas


class SesionFalsa:
    """AsyncSession mínima: cuenta accesos y devuelve datos preparados."""

    def __init__(self, localidades=(), registros=None, error=None):
        self.localidades = list(localidades)
        self.registros = registros or {}
        self.error = error
        self.llamadas = 0

    async def execute(self, stmt, *args, **kwargs):
        self.llamadas += 1
        if self.error is not None:
            raise self.error
        return _Resultado(self.localidades)

    async def get(self, modelo, id_registro):
        self.llamadas += 1
        return self.registros.get((modelo, id_registro))
