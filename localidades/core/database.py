"""
Configuración de la base de datos con SQLAlchemy async
"""
from typing import Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from localidades.core.config import settings
import logging

logger = logging.getLogger(__name__)

# Base para modelos
Base = declarative_base()

# Variables globales que se inicializan después
async_engine = None
AsyncSessionLocal = None


def _engine_kwargs(database_url: str) -> dict:
    """Opciones del pool según el driver."""
    if database_url.startswith("sqlite"):
        return {"echo": settings.DEBUG}
    return {
        "echo": settings.DEBUG,
        "pool_size": 20,
        "max_overflow": 30,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "connect_args": {
            "timeout": 10,
            "command_timeout": 10,
        },
    }


def _activar_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


async def _init_engines_async(database_url: Optional[str] = None):
    """Inicializar engine y session factory, una sola vez por proceso"""
    global async_engine, AsyncSessionLocal

    if async_engine is not None:
        return  # Ya inicializado

    database_url = database_url or settings.DATABASE_URL
    logger.info(f"[DATABASE] Inicializando con DATABASE_URL: {database_url[:50]}...")

    async_engine = create_async_engine(database_url, **_engine_kwargs(database_url))
    if database_url.startswith("sqlite"):
        event.listen(async_engine.sync_engine, "connect", _activar_foreign_keys)
    logger.info("[DATABASE] Engine asíncrono creado con éxito")

    # Session factory
    AsyncSessionLocal = async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )


async def get_db() -> AsyncSession:
    """Dependency para inyectar la sesión de la base"""
    await _init_engines_async()
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db(database_url: Optional[str] = None):
    """Crear las tablas de catálogos si no existen"""
    # Registra los modelos en Base.metadata
    import localidades.models  # noqa: F401

    await _init_engines_async(database_url)
    try:
        logger.info("[DATABASE] Iniciando conexión con la base...")
        async with async_engine.begin() as conn:
            logger.info("[DATABASE] Conexión establecida, creando tablas...")
            await conn.run_sync(Base.metadata.create_all)
            logger.info("[DATABASE] ✓ Tablas de catálogos creadas")
    except Exception as e:
        logger.error(f"[DATABASE] ✗ Error al inicializar la base: {e}", exc_info=True)
        raise


async def close_db():
    """Cerrar conexiones de la base"""
    global async_engine, AsyncSessionLocal
    if async_engine is not None:
        await async_engine.dispose()
    async_engine = None
    AsyncSessionLocal = None
