"""
System routes for health checks and system status.
"""

from fastapi import APIRouter
from typing import Dict, Any
import logging

from api.models import HealthResponse
from core.config import settings
from core.validator.schema_validator import schema_validator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/system", tags=["System"])

API_VERSION = "1.0.0"


@router.get("/health", response_model=HealthResponse)
async def health_check() -> Dict[str, Any]:
    """Health check endpoint"""
    schema_loaded = schema_validator.validator is not None
    return {
        "status": "healthy" if schema_loaded else "degraded",
        "version": API_VERSION,
        "schema_loaded": schema_loaded,
        "max_schema_depth": settings.max_schema_depth,
    }
