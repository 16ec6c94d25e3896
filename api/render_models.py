"""
Render API Models

Pydantic models for the document render endpoints.
"""

from pydantic import BaseModel, Field
from typing import List, Dict, Optional, Any

from config.settings import settings


# ==================== REQUEST MODELS ====================

class RenderRequest(BaseModel):
    """A document plus the parameters of one render request"""
    document: Dict[str, Any] = Field(..., description="Document (meta, outline, blocks, styles)")
    layout_config: Optional[Dict[str, Any]] = Field(
        default=None,
        alias="layoutConfig",
        description="Layout parameters (baseFontSize, scaleRatio, lineHeight, maxLineLength, margins, cardThreshold)",
    )
    format: str = Field(default="print-paginated", description="print-paginated | markup | flow-document (or pdf/html/docx)")
    template: Optional[str] = Field(default=None, description="Theme id overriding the document theme")
    include_annotations: bool = Field(default=True, alias="includeAnnotations")
    include_toc: bool = Field(default=True, alias="includeTOC")
    include_footnotes: bool = Field(default=True, alias="includeFootnotes")
    page_numbers: bool = Field(default=True, alias="pageNumbers")
    design_style: str = Field(default_factory=lambda: settings.default_design_style, alias="designStyle")
    color_scheme: str = Field(default_factory=lambda: settings.default_color_scheme, alias="colorScheme")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "document": {
                    "meta": {"title": "Photosynthesis"},
                    "blocks": [
                        {"id": "h1", "type": "heading", "level": 1, "text": "Key Concepts", "importance": 0.8},
                        {"id": "p1", "type": "paragraph", "text": "Plants convert light into energy.", "importance": 0.9},
                    ],
                    "styles": {"theme": "modern-card"},
                },
                "format": "pdf",
                "designStyle": "modern",
                "colorScheme": "green",
            }
        }

    def render_options(self, format: Optional[str] = None) -> Dict[str, Any]:
        """RenderOptions mapping (snake_case)"""
        return {
            "format": format or self.format,
            "template": self.template,
            "include_annotations": self.include_annotations,
            "include_toc": self.include_toc,
            "include_footnotes": self.include_footnotes,
            "page_numbers": self.page_numbers,
            "design_style": self.design_style,
            "color_scheme": self.color_scheme,
        }


class ExportRequest(RenderRequest):
    """Render one document into several formats"""
    formats: List[str] = Field(default=["print-paginated", "markup", "flow-document"])


class ValidateRequest(BaseModel):
    document: Dict[str, Any]
    layout_config: Optional[Dict[str, Any]] = Field(default=None, alias="layoutConfig")

    class Config:
        populate_by_name = True


# ==================== RESPONSE MODELS ====================

class ViolationResponse(BaseModel):
    path: str
    message: str
    code: str = "invalid"


class ValidateResponse(BaseModel):
    valid: bool
    violations: List[ViolationResponse] = []
    metadata: Dict[str, Any] = {}


class ExportResponse(BaseModel):
    success: bool
    formats: List[str] = []
    data: Dict[str, str] = {}  # format -> base64
    warnings: Dict[str, List[str]] = {}
    errors: Dict[str, str] = {}


class ThemeResponse(BaseModel):
    id: str
    name: str
    description: str


class ThemeListResponse(BaseModel):
    themes: List[ThemeResponse]
    total: int


class ErrorResponse(BaseModel):
    error: str
    violations: List[ViolationResponse] = []
    block_id: Optional[str] = None
