"""
Pytest configuration and shared fixtures for Note Layout Engine tests.
"""
import base64
import io
import sys
from pathlib import Path
from typing import Any, Dict

import pytest
from PIL import Image

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.contracts import ContractValidator, LayoutConfig, RenderOptions
from core.layout import LayoutAgent
from core.styling import StyleResolver


# ============================================================================
# Fixtures: Documents
# ============================================================================

@pytest.fixture
def png_base64() -> str:
    """A small 40x20 PNG, base64-encoded."""
    buffer = io.BytesIO()
    Image.new("RGB", (40, 20), (25, 120, 200)).save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


@pytest.fixture
def minimal_document() -> Dict[str, Any]:
    """Smallest valid document: a title and one paragraph."""
    return {
        "meta": {"title": "Minimal"},
        "blocks": [
            {"id": "p1", "type": "paragraph", "text": "Hello layout."},
        ],
    }


@pytest.fixture
def sample_document(png_base64) -> Dict[str, Any]:
    """A document exercising every block type and annotation kind."""
    return {
        "meta": {
            "title": "Photosynthesis Notes",
            "author": "Study Group",
            "date": "2024-03-01",
            "tags": ["biology", "plants"],
            "language": "en",
            "source": [{"type": "pdf", "uri": "textbook.pdf", "page": 42}],
        },
        "outline": [
            {"id": "h1", "level": 1, "title": "Key Concepts", "weight": 0.9},
            {"id": "h2", "level": 2, "title": "Process Steps", "weight": 0.4},
        ],
        "blocks": [
            {"id": "h1", "type": "heading", "level": 1, "text": "Key Concepts", "importance": 0.8},
            {
                "id": "p1",
                "type": "paragraph",
                "text": "Plants convert light energy into chemical energy stored in glucose.",
                "importance": 0.9,
                "annotations": [
                    {"type": "highlight", "span": [0, 6], "color": "#fff3cd"},
                    {"type": "note", "span": [15, 27], "note": "Mostly red and blue wavelengths."},
                    {"type": "underline", "span": [28, 32]},
                ],
            },
            {
                "id": "p2",
                "type": "paragraph",
                "text": "See the reference article for details.",
                "importance": 0.3,
                "annotations": [
                    {"type": "link", "span": [8, 25], "url": "https://example.org/photosynthesis"},
                    {"type": "strikethrough", "span": [30, 37]},
                ],
                "styleHints": {"align": "justify", "emphasis": "italic"},
            },
            {"id": "h2", "type": "heading", "level": 2, "text": "Process Steps", "importance": 0.6},
            {
                "id": "l1",
                "type": "list",
                "ordered": True,
                "items": ["Light absorption", "Water splitting", "Carbon fixation"],
                "importance": 0.5,
            },
            {"id": "q1", "type": "quote", "text": "Life runs on sunlight.", "importance": 0.4},
            {
                "id": "c1",
                "type": "code",
                "language": "text",
                "text": "6CO2 + 6H2O -> C6H12O6 + 6O2",
                "importance": 0.75,
            },
            {
                "id": "t1",
                "type": "table",
                "headers": ["Stage", "Location"],
                "rows": [["Light reactions", "Thylakoid"], ["Calvin cycle", "Stroma"]],
                "importance": 0.5,
            },
            {"id": "s1", "type": "separator"},
            {
                "id": "i1",
                "type": "image",
                "mime": "image/png",
                "data": png_base64,
                "caption": "Chloroplast diagram",
                "importance": 0.5,
            },
        ],
        "styles": {"theme": "modern-card", "spacing": "normal"},
    }


@pytest.fixture
def validated_document(sample_document):
    return ContractValidator().validate_or_raise(sample_document)


# ============================================================================
# Fixtures: Pipeline
# ============================================================================

@pytest.fixture
def layout_config() -> LayoutConfig:
    return LayoutConfig()


@pytest.fixture
def agent() -> LayoutAgent:
    return LayoutAgent()


@pytest.fixture
def prepared(agent, validated_document, layout_config):
    """Sample document validated, styled, decorated and laid out."""
    options = RenderOptions(design_style="colorful", color_scheme="green")
    return agent.prepare(validated_document, layout_config, options)


@pytest.fixture
def resolver() -> StyleResolver:
    return StyleResolver()


def render_with(renderer, prepared, **option_overrides):
    """Render a prepared document with the given renderer and options."""
    values = {"design_style": "colorful", "color_scheme": "green"}
    values.update(option_overrides)
    options = RenderOptions(format=renderer.format, **values)
    return renderer.render(
        prepared.validated,
        prepared.styles,
        prepared.document_style,
        prepared.plan,
        prepared.visuals,
        options,
        prepared.config,
        list(prepared.toc),
    )


@pytest.fixture
def render():
    return render_with
