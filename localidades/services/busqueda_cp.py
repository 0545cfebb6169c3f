"""Servicio de búsqueda de estado, municipio y localidades por código postal."""

import logging
from typing import Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from localidades.core.exceptions import (
    AlmacenError,
    FormatoInvalidoError,
    IntegridadCatalogoError,
    NoEncontradoError,
)
from localidades.models import CatEstado, CatLocalidad, CatMunicipio
from localidades.schemas.catalogos import CatalogoIdValor, CPResponse

logger = logging.getLogger(__name__)

CP_MINIMO = 1000
CP_MAXIMO = 99999

M = TypeVar("M")


def _estado_to_item(item: CatEstado) -> CatalogoIdValor:
    return CatalogoIdValor(id=item.id, value=item.estado)


def _municipio_to_item(item: CatMunicipio) -> CatalogoIdValor:
    return CatalogoIdValor(id=item.id, value=item.municipio)


def _localidad_to_item(item: CatLocalidad) -> CatalogoIdValor:
    return CatalogoIdValor(id=item.id, value=item.localidad)


def cp_valido(cp: int) -> bool:
    return CP_MINIMO <= cp <= CP_MAXIMO


def parsear_cp(valor: str) -> int:
    """Convierte el CP recibido como texto; '01000' -> 1000."""
    valor = (valor or "").strip()
    # solo dígitos ASCII: isdigit() acepta '²' y otros que int() rechaza
    if not (valor.isascii() and valor.isdigit()):
        raise FormatoInvalidoError()
    return int(valor)


class BusquedaCPService:
    """Consultas sobre los catálogos de ubicación."""

    @staticmethod
    async def _registro(db: AsyncSession, modelo: Type[M], id_registro: int, mensaje: str) -> M:
        """Registro por llave primaria; su ausencia indica un catálogo inconsistente."""
        registro: Optional[M] = await db.get(modelo, id_registro)
        if registro is None:
            logger.error(
                f"[INTEGRIDAD] {modelo.__tablename__} sin registro id={id_registro}; "
                f"los catálogos están corruptos"
            )
            raise IntegridadCatalogoError(mensaje)
        return registro

    @staticmethod
    async def buscar(db: AsyncSession, cp: int) -> CPResponse:
        """
        Estado, municipio y localidades de un código postal.

        Raises:
            FormatoInvalidoError: cp fuera de [1000, 99999]; no se consulta la base
            NoEncontradoError: no hay localidades con ese cp
            IntegridadCatalogoError: el estado o municipio referenciado no existe
            AlmacenError: falla de la base durante la consulta
        """
        if not cp_valido(cp):
            raise FormatoInvalidoError()

        try:
            result = await db.execute(
                select(CatLocalidad).where(CatLocalidad.codigo_postal == cp)
            )
            localidades = result.scalars().all()

            if not localidades:
                raise NoEncontradoError()

            # Todas las localidades de un CP comparten estado y municipio
            primera = localidades[0]
            estado = await BusquedaCPService._registro(
                db, CatEstado, primera.id_estado,
                "Error en el catalogo de estados en la base de datos",
            )
            municipio = await BusquedaCPService._registro(
                db, CatMunicipio, primera.id_municipio,
                "Error en el catalogo de municipios en la base de datos",
            )
        except SQLAlchemyError as e:
            logger.error(f"Error al consultar el CP {cp}: {e}", exc_info=True)
            raise AlmacenError(detalle=str(e)) from e

        return CPResponse(
            estado=_estado_to_item(estado),
            municipio=_municipio_to_item(municipio),
            localidades=[_localidad_to_item(item) for item in localidades],
        )
