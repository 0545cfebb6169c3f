"""Rutas de la API de catálogos de ubicación."""

import logging

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from localidades.api.deps import requiere_token
from localidades.core.database import get_db
from localidades.schemas.catalogos import CPResponse
from localidades.services.busqueda_cp import BusquedaCPService, parsear_cp

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Localidades API"], dependencies=[Depends(requiere_token)])

_TEXTO = {"text/plain": {"schema": {"type": "string"}}}


@router.get(
    "/busqueda-cp/{cp}",
    response_model=CPResponse,
    responses={
        400: {"description": "Formato incorrecto del CP", "content": _TEXTO},
        401: {"description": "Falta el token Bearer"},
        403: {"description": "Token vacío"},
        404: {"description": "No se encontró el CP", "content": _TEXTO},
        500: {"description": "Error interno del servidor", "content": _TEXTO},
    },
)
async def busqueda_cp(
    cp: str = Path(..., description="Código postal a consultar", examples=["14390"]),
    db: AsyncSession = Depends(get_db),
):
    """Buscar estado, municipio y localidades por código postal."""
    return await BusquedaCPService.buscar(db, parsear_cp(cp))
