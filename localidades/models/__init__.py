from localidades.models.catalogos import (
    CatEstado,
    CatMunicipio,
    CatCodigoPostal,
    CatLocalidad,
)

__all__ = [
    "CatEstado",
    "CatMunicipio",
    "CatCodigoPostal",
    "CatLocalidad",
]
