"""
FastAPI application exposing the workflow compiler to the editor surfaces.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import compile_router, system_router
from api.cache_service import get_compile_cache
from api.routes.system import API_VERSION
from core.config import settings
from core.logging_config import configure_logging_from_settings, get_logger
from api.middleware import add_logging_middleware

logger = get_logger(__name__)

app = FastAPI(
    title="Workflow Compiler API",
    description="Compiles editor workflow definitions into deterministic, executable pipelines "
                "and serves the generated source for live preview.",
    version=API_VERSION,
    openapi_tags=[
        {
            "name": "Compile",
            "description": "Workflow compilation and compile cache"
        },
        {
            "name": "System",
            "description": "Health and status endpoints"
        }
    ]
)


@app.on_event("startup")
async def startup_event():
    """Configure logging when the server starts"""
    configure_logging_from_settings(settings)
    logger.info("Starting workflow compiler API server...")
    cache_status = get_compile_cache().get_cache_status()
    logger.info(
        f"Compile cache: max {cache_status['max_entries']} entries, ttl {cache_status['ttl_seconds']}s"
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Drop cached results when the server shuts down"""
    get_compile_cache().clear()
    logger.info("Workflow compiler API server shutdown complete")

# Add logging middleware first (for request tracking)
add_logging_middleware(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,  # Must be False when allow_origins=["*"]
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(compile_router)
app.include_router(system_router)


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "message": "Workflow Compiler API",
        "version": API_VERSION,
        "docs": "/docs",
        "redoc": "/redoc"
    }
