"""
Carga de los catálogos de ubicación desde archivos CSV.

Los catálogos se distribuyen en cuatro archivos (uno por tabla):
- cat_estados.csv:           id_estado, estado
- cat_municipios.csv:        id_municipio, municipio, id_estado
- cat_codigos_postales.csv:  cp, id_municipio, id_estado
- cat_localidades.csv:       id_localidad, localidad, cp, id_municipio, id_estado

Estrategia:
1. Por tabla, si ya tiene registros no se hace nada (seguro en cada arranque)
2. Si está vacía, se leen todas las filas y se validan como registros tipados;
   la primera fila mal formada aborta la carga
3. Estados y municipios se insertan en una sola sentencia; códigos postales y
   localidades en lotes de SEED_BATCH_SIZE, con commit por lote
4. Orden fijo por las llaves foráneas: estados -> municipios -> CPs -> localidades

Cualquier falla se reporta como CargaCatalogoError y es fatal en el arranque.
"""

import csv
import logging
from pathlib import Path
from typing import Annotated, Any, Awaitable, Callable, Dict, Iterator, List, Optional, Tuple, Type

from pydantic import BaseModel, BeforeValidator, Field, ValidationError
from sqlalchemy import func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from localidades.core.config import settings
from localidades.core.exceptions import CargaCatalogoError
from localidades.models import CatCodigoPostal, CatEstado, CatLocalidad, CatMunicipio

logger = logging.getLogger(__name__)


def _entero(valor: Any) -> Any:
    """Convierte '01000' -> 1000; rechaza decimales y texto."""
    if isinstance(valor, str):
        valor = valor.strip()
        digitos = valor.lstrip("-")
        if not (digitos.isascii() and digitos.isdigit()):
            raise ValueError(f"se esperaba un entero, se recibió '{valor}'")
        return int(valor)
    return valor


def _texto(valor: Any) -> Any:
    if isinstance(valor, str):
        return valor.strip()
    return valor


Entero = Annotated[int, BeforeValidator(_entero)]
Nombre50 = Annotated[str, BeforeValidator(_texto), Field(min_length=1, max_length=50)]
Nombre100 = Annotated[str, BeforeValidator(_texto), Field(min_length=1, max_length=100)]


# ---- Registros tipados (una fila de CSV) ----


class EstadoCSV(BaseModel):
    id_estado: Entero
    estado: Nombre50

    def to_row(self) -> Dict[str, Any]:
        return {"id": self.id_estado, "estado": self.estado}


class MunicipioCSV(BaseModel):
    id_municipio: Entero
    municipio: Nombre50
    id_estado: Entero

    def to_row(self) -> Dict[str, Any]:
        return {"id": self.id_municipio, "municipio": self.municipio, "id_estado": self.id_estado}


class CodigoPostalCSV(BaseModel):
    cp: Entero
    id_municipio: Entero
    id_estado: Entero

    def to_row(self) -> Dict[str, Any]:
        return {"codigo_postal": self.cp, "id_municipio": self.id_municipio, "id_estado": self.id_estado}


class LocalidadCSV(BaseModel):
    id_localidad: Entero
    localidad: Nombre100
    cp: Entero
    id_municipio: Entero
    id_estado: Entero

    def to_row(self) -> Dict[str, Any]:
        return {
            "id": self.id_localidad,
            "localidad": self.localidad,
            "codigo_postal": self.cp,
            "id_municipio": self.id_municipio,
            "id_estado": self.id_estado,
        }


# ---- Lectura de CSV ----


def leer_catalogo(
    ruta: str,
    catalogo: str,
    encoding: Optional[str] = None,
    columnas: Optional[List[str]] = None,
) -> Iterator[Tuple[int, Dict[str, str]]]:
    """
    Generador de (número de línea, fila) de `<ruta>/<catalogo>.csv`.

    La primera línea es el encabezado. Falla si el archivo no existe, si no
    tiene encabezado o si al encabezado le faltan `columnas`.
    """
    path = Path(ruta) / f"{catalogo}.csv"
    try:
        with path.open("r", encoding=encoding or settings.CATALOGOS_ENCODING, newline="") as f:
            reader = csv.DictReader(f)
            encabezado = reader.fieldnames
            if not encabezado:
                raise CargaCatalogoError(f"{catalogo}.csv: el archivo está vacío, falta el encabezado")
            faltantes = [c for c in columnas or [] if c not in encabezado]
            if faltantes:
                raise CargaCatalogoError(f"{catalogo}.csv: faltan columnas {', '.join(faltantes)}")
            yield from ((reader.line_num, fila) for fila in reader)
    except FileNotFoundError as e:
        raise CargaCatalogoError(f"No se pudo leer el catálogo de {catalogo}: {path} no existe") from e
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise CargaCatalogoError(f"No se pudo leer el catálogo de {catalogo}: {e}") from e


def parsear_catalogo(
    ruta: str,
    catalogo: str,
    modelo: Type[BaseModel],
    encoding: Optional[str] = None,
) -> List[BaseModel]:
    """Lee el catálogo completo como registros `modelo`; la primera fila inválida aborta."""
    registros = []
    for linea, fila in leer_catalogo(ruta, catalogo, encoding, list(modelo.model_fields)):
        if None in fila:
            raise CargaCatalogoError(f"{catalogo}.csv, línea {linea}: la fila tiene columnas de más")
        try:
            registros.append(modelo.model_validate(fila))
        except ValidationError as e:
            error = e.errors()[0]
            campo = ".".join(str(loc) for loc in error["loc"])
            raise CargaCatalogoError(
                f"{catalogo}.csv, línea {linea}: valor inválido en '{campo}' ({error['msg']})"
            ) from e
    return registros


# ---- Operaciones contra la base ----


async def contar_registros(db: AsyncSession, modelo) -> int:
    """Cantidad de filas de la tabla de `modelo`."""
    result = await db.execute(select(func.count()).select_from(modelo))
    return result.scalar_one()


async def _insertar(
    db: AsyncSession,
    modelo,
    filas: List[Dict[str, Any]],
    batch_size: Optional[int] = None,
) -> int:
    """Inserta `filas` en una sentencia o en lotes de `batch_size` (commit por lote)."""
    if not filas:
        return 0

    tamano = batch_size or len(filas)
    insertadas = 0
    try:
        for inicio in range(0, len(filas), tamano):
            lote = filas[inicio:inicio + tamano]
            await db.execute(insert(modelo), lote)
            await db.commit()
            insertadas += len(lote)
            logger.debug(f"[CARGA] {modelo.__tablename__}: {insertadas:,}/{len(filas):,}")
    except SQLAlchemyError as e:
        await db.rollback()
        raise CargaCatalogoError(
            f"Error al insertar en {modelo.__tablename__} (después de {insertadas:,} filas): {e.__class__.__name__}"
        ) from e
    return insertadas


Validador = Callable[[AsyncSession, List[Any]], Awaitable[None]]


async def _llenar_catalogo(
    db: AsyncSession,
    ruta: str,
    catalogo: str,
    modelo_csv: Type[BaseModel],
    modelo_db,
    batch_size: Optional[int] = None,
    validador: Optional[Validador] = None,
) -> int:
    """Carga un catálogo si su tabla está vacía. Devuelve filas insertadas."""
    try:
        existentes = await contar_registros(db, modelo_db)
    except SQLAlchemyError as e:
        raise CargaCatalogoError(f"No se pudo consultar {modelo_db.__tablename__}: {e.__class__.__name__}") from e

    if existentes:
        logger.info(f"[CARGA] {catalogo}: {existentes:,} registros existentes, se omite")
        return 0

    registros = parsear_catalogo(ruta, catalogo, modelo_csv)
    if not registros:
        raise CargaCatalogoError(f"{catalogo}.csv: el archivo no contiene registros")

    if validador is not None:
        await validador(db, registros)

    insertadas = await _insertar(db, modelo_db, [r.to_row() for r in registros], batch_size)
    logger.info(f"[CARGA] {catalogo}: {insertadas:,} registros insertados")
    return insertadas


# ---- Validación de consistencia entre catálogos ----


async def _validar_codigos_postales(db: AsyncSession, registros: List[CodigoPostalCSV]) -> None:
    """Cada CP debe apuntar a un municipio existente del mismo estado."""
    result = await db.execute(select(CatMunicipio.id, CatMunicipio.id_estado))
    estado_por_municipio = {id_mun: id_edo for id_mun, id_edo in result.all()}

    for r in registros:
        esperado = estado_por_municipio.get(r.id_municipio)
        if esperado is None:
            raise CargaCatalogoError(f"CP {r.cp}: el municipio {r.id_municipio} no existe")
        if esperado != r.id_estado:
            raise CargaCatalogoError(
                f"CP {r.cp}: el municipio {r.id_municipio} pertenece al estado {esperado}, no al {r.id_estado}"
            )


async def _validar_localidades(db: AsyncSession, registros: List[LocalidadCSV]) -> None:
    """Municipio y estado de cada localidad deben coincidir con los de su CP."""
    result = await db.execute(
        select(CatCodigoPostal.codigo_postal, CatCodigoPostal.id_municipio, CatCodigoPostal.id_estado)
    )
    cps = {cp: (id_mun, id_edo) for cp, id_mun, id_edo in result.all()}

    for r in registros:
        esperado = cps.get(r.cp)
        if esperado is None:
            raise CargaCatalogoError(f"Localidad {r.id_localidad}: el CP {r.cp} no existe")
        if esperado != (r.id_municipio, r.id_estado):
            raise CargaCatalogoError(
                f"Localidad {r.id_localidad}: municipio/estado ({r.id_municipio}, {r.id_estado}) "
                f"no coinciden con los del CP {r.cp} {esperado}"
            )


# ---- Carga por catálogo ----


async def llenar_catalogos_estados_municipios(db: AsyncSession, ruta: str) -> Dict[str, int]:
    """Estados y municipios; pocos registros, se insertan sin lotes."""
    return {
        "cat_estados": await _llenar_catalogo(db, ruta, "cat_estados", EstadoCSV, CatEstado),
        "cat_municipios": await _llenar_catalogo(db, ruta, "cat_municipios", MunicipioCSV, CatMunicipio),
    }


async def llenar_catalogo_codigos_postales(
    db: AsyncSession,
    ruta: str,
    batch_size: Optional[int] = None,
    validar: Optional[bool] = None,
) -> int:
    validar = settings.VALIDAR_CONSISTENCIA if validar is None else validar
    return await _llenar_catalogo(
        db, ruta, "cat_codigos_postales", CodigoPostalCSV, CatCodigoPostal,
        batch_size=batch_size or settings.SEED_BATCH_SIZE,
        validador=_validar_codigos_postales if validar else None,
    )


async def llenar_catalogo_localidades(
    db: AsyncSession,
    ruta: str,
    batch_size: Optional[int] = None,
    validar: Optional[bool] = None,
) -> int:
    validar = settings.VALIDAR_CONSISTENCIA if validar is None else validar
    return await _llenar_catalogo(
        db, ruta, "cat_localidades", LocalidadCSV, CatLocalidad,
        batch_size=batch_size or settings.SEED_BATCH_SIZE,
        validador=_validar_localidades if validar else None,
    )


async def poblar_catalogos(
    db: AsyncSession,
    ruta: Optional[str] = None,
    batch_size: Optional[int] = None,
    validar: Optional[bool] = None,
) -> Dict[str, int]:
    """
    Pobla los cuatro catálogos en orden de dependencia.

    Returns:
        dict {tabla: filas insertadas}; 0 para tablas que ya tenían datos
    """
    ruta = ruta or settings.CATALOGOS_PATH
    logger.info(f"[CARGA] Poblando catálogos desde {ruta}")

    resumen = await llenar_catalogos_estados_municipios(db, ruta)
    resumen["cat_codigos_postales"] = await llenar_catalogo_codigos_postales(db, ruta, batch_size, validar)
    resumen["cat_localidades"] = await llenar_catalogo_localidades(db, ruta, batch_size, validar)

    logger.info(f"[CARGA] ✓ Catálogos listos: {resumen}")
    return resumen


async def estadisticas_catalogos(db: AsyncSession) -> Dict[str, int]:
    """Cantidad de registros por tabla de catálogo."""
    return {
        modelo.__tablename__: await contar_registros(db, modelo)
        for modelo in (CatEstado, CatMunicipio, CatCodigoPostal, CatLocalidad)
    }
