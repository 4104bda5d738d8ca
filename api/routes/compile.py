"""
Compile routes: the live preview surface of the workflow editors.
"""

from fastapi import APIRouter, Body, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from typing import Dict, Any, Optional
import logging

from api.cache_service import get_compile_cache
from api.models import CacheClearResponse, CacheStatusResponse, CompileResponse, ValidationResponse
from core.config import settings
from core.validator.schema_validator import validate_document
from services.compiler import CompileDriver, JSONFormatter, content_hash

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/compile", tags=["Compile"])

driver = CompileDriver(settings)


@router.post(
    "",
    response_model=CompileResponse,
    responses={422: {"model": ValidationResponse}},
)
async def compile_workflow(
    document: Dict[str, Any] = Body(..., description="Workflow definition as saved by the editor"),
    include_source: Optional[bool] = Query(None, description="Also return the generated Python module"),
):
    """
    Compile a workflow definition into a pipeline.

    Invalid documents are rejected with 422 and the validation findings.
    Compiles that abort still return 200 with ``success`` false and the
    diagnostics explaining why.
    """
    if include_source is None:
        include_source = settings.render_source_by_default

    validation = validate_document(document)
    if not validation.ok:
        logger.info(f"Rejected workflow document with {len(validation.errors)} schema errors")
        return JSONResponse(
            status_code=422,
            content=JSONFormatter.format_validation_response(validation),
        )

    cache = get_compile_cache()
    digest = content_hash(document)
    cached = cache.get(digest, include_source)
    if cached is not None:
        logger.debug(f"Compile cache hit for {digest[:12]}")
        return {**cached, "cached": True}

    try:
        result = driver.compile(document, render_source=include_source)
    except ValidationError as e:
        logger.info(f"Workflow document could not be loaded: {e}")
        raise HTTPException(status_code=422, detail=[
            {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
            for error in e.errors()
        ])

    formatted = JSONFormatter.format_compile_result(result, include_source=include_source)
    cache.put(digest, include_source, formatted)
    return {**formatted, "cached": False}


@router.get("/cache", response_model=CacheStatusResponse)
async def get_cache_status() -> Dict[str, Any]:
    """Get compile cache status"""
    return get_compile_cache().get_cache_status()


@router.delete("/cache", response_model=CacheClearResponse)
async def clear_cache() -> Dict[str, Any]:
    """Drop all cached compile results"""
    cleared = get_compile_cache().clear()
    return {"status": "success", "cleared": cleared}
