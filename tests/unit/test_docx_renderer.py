"""
Unit tests for the flow-document (DOCX) backend.

The output is reopened with python-docx and checked structurally.
"""
import io

import docx
import pytest

from core.contracts import OutputFormat
from core.layout import DocxRenderer, LayoutAgent


def reopen(content: bytes):
    return docx.Document(io.BytesIO(content))


def paragraph_texts(document):
    return [p.text for p in document.paragraphs]


@pytest.fixture
def docx_output(prepared, render):
    return render(DocxRenderer(), prepared)


@pytest.fixture
def document(docx_output):
    return reopen(docx_output.content)


class TestDOCXStructure:

    def test_is_zip_package(self, docx_output):
        assert docx_output.content[:2] == b"PK"

    def test_core_properties(self, document):
        assert document.core_properties.title == "Photosynthesis Notes"
        assert document.core_properties.author == "Study Group"
        assert document.core_properties.keywords == "biology, plants"

    def test_title_first(self, document):
        assert document.paragraphs[0].text == "Photosynthesis Notes"
        assert document.paragraphs[0].style.name == "Title"

    def test_page_geometry_follows_plan(self, prepared, document):
        section = document.sections[0]
        assert section.page_width.pt == pytest.approx(prepared.plan.page_width, abs=1)
        assert section.page_height.pt == pytest.approx(prepared.plan.page_height, abs=1)

    def test_headings(self, document):
        headings = [p for p in document.paragraphs if p.style.name.startswith("Heading")]
        styles = {p.text: p.style.name for p in headings}
        assert styles["Table of Contents"] == "Heading 1"
        # outline headings carry an icon prefix
        assert any(t.endswith(" Key Concepts") and s == "Heading 1" for t, s in styles.items())
        assert any(t.endswith(" Process Steps") and s == "Heading 2" for t, s in styles.items())

    def test_block_text(self, document):
        texts = paragraph_texts(document)
        assert "Life runs on sunlight." in texts
        assert "6CO2 + 6H2O -> C6H12O6 + 6O2" in texts
        assert "Chloroplast diagram" in texts

    def test_ordered_list_numbering(self, document):
        texts = paragraph_texts(document)
        assert "1. Light absorption" in texts
        assert "2. Water splitting" in texts
        assert "3. Carbon fixation" in texts

    def test_table(self, document):
        (table,) = document.tables
        assert table.rows[0].cells[0].text == "Stage"
        assert table.rows[2].cells[1].text == "Stroma"

    def test_image_embedded(self, document):
        assert len(document.inline_shapes) == 1


class TestTOCAndNotes:

    def test_toc_before_blocks(self, document):
        texts = paragraph_texts(document)
        toc_index = texts.index("Table of Contents")
        entry = next(t for t in texts if t.startswith("Key Concepts\t"))
        # layout page 1 follows the TOC page
        assert entry == "Key Concepts\t2"
        assert toc_index < texts.index(entry) < texts.index("Life runs on sunlight.")

    def test_notes_at_end(self, document):
        texts = paragraph_texts(document)
        assert texts.index("Notes") > texts.index("Chloroplast diagram")
        assert "1. Mostly red and blue wavelengths." in texts

    def test_toggles(self, prepared, render):
        document = reopen(render(DocxRenderer(), prepared, include_toc=False, include_footnotes=False).content)
        texts = paragraph_texts(document)
        assert "Table of Contents" not in texts
        assert "Notes" not in texts

    def test_no_notes_without_annotations(self, prepared, render):
        document = reopen(render(DocxRenderer(), prepared, include_annotations=False, include_footnotes=True).content)
        texts = paragraph_texts(document)
        assert "Notes" not in texts
        assert "1. Mostly red and blue wavelengths." not in texts


class TestDOCXWarnings:

    def test_unsupported_visuals_reported(self, docx_output):
        warnings = docx_output.warnings
        assert "gradient backgrounds are not supported in flow documents; omitted" in warnings
        assert "card shadows are not supported in flow documents; omitted" in warnings
        assert "background textures are not supported in flow documents; omitted" in warnings
        assert "watermark rendered as page header text" in warnings

    def test_watermark_in_header(self, document):
        header_text = "".join(p.text for p in document.sections[0].header.paragraphs)
        assert header_text

    def test_minimal_style_has_fewer_warnings(self, prepared, render):
        output = render(DocxRenderer(), prepared, design_style="minimal")
        assert not any("gradient" in w for w in output.warnings)

    def test_undecodable_image_keeps_caption(self):
        payload = {
            "meta": {"title": "Broken image"},
            "blocks": [{
                "id": "img", "type": "image", "mime": "image/png",
                "data": "bm90IGFuIGltYWdl", "caption": "Still here",
            }],
        }
        result = LayoutAgent().process(payload, None, {"format": "docx"})

        assert result.ok
        assert any(w.startswith("block 'img': image could not be decoded") for w in result.warnings)
        assert "Still here" in paragraph_texts(reopen(result.content))

    def test_remote_image(self):
        payload = {
            "meta": {"title": "Remote"},
            "blocks": [{"id": "img", "type": "image", "url": "https://example.org/a.png"}],
        }
        result = LayoutAgent().process(payload, None, {"format": "flow-document"})

        assert result.ok
        assert "block 'img': remote image not embedded; caption only" in result.warnings


def test_content_is_deterministic(prepared, render, document):
    again = reopen(render(DocxRenderer(), prepared).content)
    assert paragraph_texts(again) == paragraph_texts(document)


def test_format_identity():
    assert DocxRenderer.format == OutputFormat.FLOW_DOCUMENT
    assert DocxRenderer.supports_format("docx")
