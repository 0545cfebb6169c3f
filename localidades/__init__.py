"""
Localidades API - estado, municipio y localidades por código postal.

Usage:
    python -m localidades serve      # Poblar catálogos y levantar el servidor HTTP
    python -m localidades seed       # Sólo poblar catálogos
    python -m localidades migrate    # Aplicar migraciones Alembic
    python -m localidades stats      # Registros por catálogo
    python -m localidades query <cp> # Consultar un código postal
"""

__version__ = "1.0.0"
