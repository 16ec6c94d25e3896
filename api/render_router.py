"""
Render API Router

FastAPI endpoints for document preview, rendering, multi-format export,
validation and the theme catalog.
"""

import base64
import logging
import re
from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse, Response

from config.settings import settings
from core.contracts import (
    ConfigurationError,
    ContractValidator,
    LayoutConfig,
    OutputFormat,
    create_document_summary,
    load_document,
)
from core.layout import LayoutAgent, RenderResult, build_toc
from core.layout.executor.block_flow import BlockFlowExecutor
from core.styling import StyleResolver, list_themes

from .render_models import (
    ErrorResponse,
    ExportRequest,
    ExportResponse,
    RenderRequest,
    ThemeListResponse,
    ValidateRequest,
    ValidateResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/templates", tags=["Templates - Document Rendering"])


def _check_size(document: Dict[str, Any]) -> None:
    blocks = document.get("blocks")
    if isinstance(blocks, list) and len(blocks) > settings.max_document_blocks:
        raise HTTPException(
            status_code=413,
            detail=f"Document has {len(blocks)} blocks; the limit is {settings.max_document_blocks}",
        )


def _filename(title: str, output_format: OutputFormat) -> str:
    stem = re.sub(r"[^A-Za-z0-9_-]+", "_", title).strip("_")[:60] or "document"
    return f"{stem}.{output_format.extension}"


def _failure(result: RenderResult) -> JSONResponse:
    """422 for invalid documents or configuration, 500 for backend failures"""
    body = ErrorResponse(
        error=result.error or "render failed",
        violations=[v.to_dict() for v in result.violations],
        block_id=result.error_block_id,
    )
    status = 500 if result.plan is not None else 422
    return JSONResponse(status_code=status, content=body.model_dump())


def _render(request: RenderRequest, output_format: str) -> RenderResult:
    _check_size(request.document)
    try:
        return LayoutAgent().process(
            request.document,
            request.layout_config,
            request.render_options(output_format),
        )
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e))


# ==================== RENDER ENDPOINTS ====================
# Rendering is CPU-bound and synchronous: plain `def` endpoints run in
# FastAPI's threadpool so concurrent requests do not block the event loop.

@router.post(
    "/preview",
    responses={422: {"model": ErrorResponse}},
    summary="Render the markup preview",
)
def preview(request: RenderRequest):
    """
    Render the document to HTML for in-browser preview.

    The requested `format` is ignored: previews are always markup.
    """
    result = _render(request, OutputFormat.MARKUP.value)
    if not result.ok:
        return _failure(result)
    return Response(content=result.content, media_type=result.media_type)


@router.post(
    "/render",
    responses={422: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Render a document to one format",
)
def render(request: RenderRequest):
    """
    Render the document in the requested format.

    **Formats:**
    - `print-paginated` (`pdf`) - fixed-size pages
    - `markup` (`html`) - standalone HTML page
    - `flow-document` (`docx`) - Word document
    """
    result = _render(request, request.format)
    if not result.ok:
        return _failure(result)

    title = request.document.get("meta", {}).get("title", "document")
    headers = {
        "Content-Disposition": f'attachment; filename="{_filename(str(title), result.format)}"',
        "X-Render-Warnings": str(len(result.warnings)),
        "X-Document-Checksum": result.checksum or "",
    }
    return Response(content=result.content, media_type=result.media_type, headers=headers)


@router.post(
    "/export",
    response_model=ExportResponse,
    responses={422: {"model": ErrorResponse}},
    summary="Render a document to several formats",
)
def export(request: ExportRequest):
    """Render once, export many: validation and layout are shared by every format"""
    _check_size(request.document)
    try:
        results = LayoutAgent().render_many(
            request.document,
            request.formats,
            request.layout_config,
            request.render_options(),
        )
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    # Rejected before layout: the same problem applies to every format
    rejected = [r for r in results.values() if not r.ok and r.plan is None]
    if rejected:
        return _failure(rejected[0])

    response = ExportResponse(success=all(r.ok for r in results.values()))
    for fmt, result in results.items():
        if result.ok:
            response.formats.append(fmt.value)
            response.data[fmt.value] = base64.b64encode(result.content).decode("ascii")
            if result.warnings:
                response.warnings[fmt.value] = result.warnings
        else:
            response.errors[fmt.value] = result.error or "render failed"
    return response


# ==================== VALIDATION ====================

@router.post("/validate", response_model=ValidateResponse, summary="Validate a document")
def validate(request: ValidateRequest):
    """
    Validate a document without rendering it.

    Returns every violation at once. For a valid document the metadata
    includes the page count of its layout.
    """
    document, violations = load_document(request.document)
    if violations:
        return ValidateResponse(valid=False, violations=[v.to_dict() for v in violations])

    metadata = create_document_summary(document)
    try:
        config = LayoutConfig.from_dict(request.layout_config)
        validated = ContractValidator().validate_or_raise(document)
        resolver = StyleResolver()
        styles = resolver.resolve_all(validated)
        page_size = resolver.resolve_document(validated.styles).page_size
        plan = BlockFlowExecutor(config, page_size=page_size).execute(validated, styles)
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    metadata["headingCount"] = metadata["blockTypes"].get("heading", 0)
    metadata["tocEntries"] = len(build_toc(validated, plan))
    metadata["pageCount"] = plan.page_count
    metadata["cardCount"] = sum(1 for box in plan.boxes if box.is_card)
    return ValidateResponse(valid=True, metadata=metadata)


# ==================== THEMES ====================

@router.get("/themes", response_model=ThemeListResponse, summary="List themes")
async def themes():
    catalog: List[Dict[str, str]] = list_themes()
    return ThemeListResponse(themes=catalog, total=len(catalog))
