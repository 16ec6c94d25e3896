#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
FastAPI Web Server - REST API for the Note Layout Engine.

This module provides the REST endpoints of the layout core:
- Markup preview of a document
- Rendering to PDF, HTML or DOCX
- Multi-format export
- Document validation
- Theme catalog
- Health monitoring

Usage:
    # Start server
    uvicorn api.main:app --host 0.0.0.0 --port 8000

    # Or run directly
    python -m api.main

API Documentation:
    - OpenAPI docs: http://localhost:8000/docs
    - ReDoc: http://localhost:8000/redoc

Key Endpoints:
    POST /api/templates/preview - HTML preview
    POST /api/templates/render - Render one format
    POST /api/templates/export - Render several formats (base64)
    POST /api/templates/validate - Validate without rendering
    GET /api/templates/themes - List themes

Configuration:
    Environment variables (prefix NOTELAYOUT_):
    - NOTELAYOUT_LOG_LEVEL: Log level (default: INFO)
    - NOTELAYOUT_FONT_DIR: Directory with <Family>.ttf fonts for PDF output
    - NOTELAYOUT_MAX_DOCUMENT_BLOCKS: Largest accepted document (default: 5000)
"""

import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.logging_config import setup_logger
from config.settings import settings
from core.layout import __version__
from core.layout.metrics import image_cache_stats

from api.render_router import router as render_router

logger = setup_logger("api", log_file=settings.log_file, level=settings.log_level)
setup_logger("core", log_file=settings.log_file, level=settings.log_level)

app = FastAPI(
    title=settings.api_title,
    description="Validates structured documents and renders them to PDF, HTML and DOCX",
    version=__version__,
)

# CORS middleware - local front-ends
ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",  # Vite dev server
    "http://127.0.0.1:5173",
    "http://localhost:8000",
    "http://127.0.0.1:8000",
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(render_router)


# =============================================================================
# Health Check
# =============================================================================

@app.get("/health")
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": time.time(),
        "imageCache": image_cache_stats().to_dict(),
    }


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    logger.info("Starting Note Layout Engine API Server...")
    logger.info("API Documentation: http://localhost:8000/docs")

    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
