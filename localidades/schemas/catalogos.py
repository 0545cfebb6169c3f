"""Schemas de intercambio para la búsqueda por código postal."""

from pydantic import BaseModel, Field


class CatalogoIdValor(BaseModel):
    """Par identificador / etiqueta de un registro de catálogo"""
    id: int
    value: str


class CPResponse(BaseModel):
    """Estado, municipio y localidades asociados a un código postal"""
    estado: CatalogoIdValor
    municipio: CatalogoIdValor
    localidades: list[CatalogoIdValor] = Field(default_factory=list)

    model_config = {
        "json_schema_extra": {
            "example": {
                "estado": {"id": 9, "value": "Querétaro"},
                "municipio": {"id": 22, "value": "Querétaro"},
                "localidades": [{"id": 1, "value": "Centro"}],
            }
        }
    }

