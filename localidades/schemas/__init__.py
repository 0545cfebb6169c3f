from localidades.schemas.catalogos import CatalogoIdValor, CPResponse

__all__ = ["CatalogoIdValor", "CPResponse"]
