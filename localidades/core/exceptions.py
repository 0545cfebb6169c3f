"""
Excepciones del dominio de catálogos.

Cada excepción conserva su clasificación hasta la frontera más cercana
(capa HTTP o arranque), donde se traduce a una respuesta o se aborta el
proceso.
"""
from fastapi import status


class CatalogoError(Exception):
    """Base de los errores de catálogo"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    mensaje: str = "Error interno del servidor"

    def __init__(self, mensaje: str | None = None, detalle: str | None = None):
        self.mensaje = mensaje or self.mensaje
        self.detalle = detalle
        super().__init__(self.mensaje)


class FormatoInvalidoError(CatalogoError):
    """Entrada mal formada; culpa del cliente, nunca se reintenta"""

    status_code = status.HTTP_400_BAD_REQUEST
    mensaje = "Formato de código postal inválido"


class NoEncontradoError(CatalogoError):
    """Entrada válida sin registros que coincidan"""

    status_code = status.HTTP_404_NOT_FOUND
    mensaje = "Código postal no encontrado"


class IntegridadCatalogoError(CatalogoError):
    """El catálogo referencia un estado o municipio inexistente"""

    mensaje = "Error de integridad en los catálogos de la base de datos"


class AlmacenError(CatalogoError):
    """Falla de transporte o de consulta contra la base"""

    mensaje = "Error en la base de datos"


class CargaCatalogoError(CatalogoError):
    """Falla al poblar los catálogos; fatal durante el arranque"""

    mensaje = "Error al llenar los catálogos"
