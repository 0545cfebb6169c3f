# API Routes module
from localidades.api.routes.catalogos import router as catalogos_router
