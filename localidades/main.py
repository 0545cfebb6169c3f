"""
Localidades API - Aplicación principal FastAPI
Mini servicio de ubicación: estado, municipio y localidades por código postal
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.exceptions import RequestValidationError
import logging

from localidades.core.config import settings
from localidades.core.database import init_db, close_db
from localidades.core import database
from localidades.core.exceptions import CatalogoError
from localidades.api.routes import catalogos_router
from localidades.services.carga_catalogos import poblar_catalogos

# Configurar logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Ciclo de vida: la base y los catálogos deben estar listos antes de aceptar tráfico"""
    # Startup
    logger.info("=" * 80)
    logger.info("[STARTUP] Iniciando Localidades API...")
    logger.info(f"[STARTUP] Versión: {settings.APP_VERSION}")
    logger.info(f"[STARTUP] Ambiente: {settings.ENVIRONMENT}")

    try:
        logger.info("[STARTUP] Conectando a la base de datos...")
        await init_db()
        logger.info("[STARTUP] ✓ Base de datos inicializada")
    except Exception as e:
        logger.error(f"[STARTUP] ✗ Error al inicializar la base de datos: {e}", exc_info=True)
        await close_db()
        raise

    try:
        logger.info("[STARTUP] Poblando catálogos...")
        async with database.AsyncSessionLocal() as session:
            await poblar_catalogos(session, settings.CATALOGOS_PATH)
        logger.info("[STARTUP] ✓ Catálogos disponibles")
    except Exception as e:
        logger.error(f"[STARTUP] ✗ Error al llenar los catálogos: {e}", exc_info=True)
        await close_db()
        raise

    logger.info("[STARTUP] ✓ Aplicación iniciada")
    logger.info("=" * 80)
    yield

    # Shutdown
    logger.info("[SHUTDOWN] Cerrando aplicación...")
    await close_db()
    logger.info("[SHUTDOWN] ✓ Aplicación cerrada")


# Crear aplicación
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
    ## Localidades API

    Mini servicio de ubicación.

    ### Funcionalidades:
    - Búsqueda de estado, municipio y localidades por código postal

    ### Autenticación:
    Enviar `Authorization: Bearer <token>` en cada petición a `/api`.
    """,
    docs_url="/swagger-ui",
    redoc_url="/redoc",
    openapi_url="/api-docs/openapi.json",
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)


# Handlers de error
@app.exception_handler(CatalogoError)
async def catalogo_exception_handler(request: Request, exc: CatalogoError):
    """Errores de catálogo como texto plano con su código HTTP"""
    contenido = exc.mensaje
    if exc.status_code >= 500 and settings.DEBUG and exc.detalle:
        contenido = f"{contenido}: {exc.detalle}"
    return PlainTextResponse(contenido, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handler para errores de validación"""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Error de validación",
            "errors": errors
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handler general de excepciones"""
    logger.error(f"Error no controlado: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Error interno del servidor",
            "message": str(exc) if settings.DEBUG else "Ocurrió un error inesperado"
        }
    )


# Registrar rutas
app.include_router(catalogos_router, prefix="/api")


# Health check
@app.get("/", tags=["Health"])
async def root():
    """Ruta raíz"""
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running"
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Verificación de salud de la aplicación"""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT
    }
