#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Layout Agent

Main orchestrator for the layout core. Takes a document (validated
Document or raw mapping) and produces the byte stream of one or more
output formats.

Pipeline:
1. Validate (all violations collected)
2. Resolve styles and generate visual elements (concurrently)
3. Execute block flow -> LayoutPlan
4. Build the table of contents
5. Render

Version: 1.0.0
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union
import logging

from core.contracts import (
    ConfigurationError,
    ContractValidator,
    Document,
    DocumentValidationError,
    LayoutConfig,
    OutputFormat,
    RenderBackendError,
    RenderOptions,
    SchemaViolation,
    ValidatedDocument,
)
from core.styling import ResolvedStyle, StyleResolver
from core.styling.themes import resolve_theme_name
from core.visuals import AdvancedVisualElements, VisualEnhancer
from .executor.block_flow import BlockFlowExecutor, LayoutPlan
from .renderer import get_renderer
from .toc import TocEntry, build_toc

logger = logging.getLogger(__name__)

DocumentInput = Union[Document, ValidatedDocument, Mapping[str, Any]]


@dataclass
class RenderResult:
    """
    Outcome of one render request.

    ``ok`` is True only when ``content`` holds the rendered bytes. On a
    validation failure ``violations`` lists every problem; on a
    configuration or backend failure ``error`` describes it.
    """
    ok: bool
    format: Optional[OutputFormat] = None
    content: bytes = b""
    violations: List[SchemaViolation] = field(default_factory=list)
    error: Optional[str] = None
    error_block_id: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    plan: Optional[LayoutPlan] = None
    checksum: Optional[str] = None

    @property
    def media_type(self) -> Optional[str]:
        return self.format.media_type if self.format else None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly summary (content omitted)"""
        return {
            "ok": self.ok,
            "format": self.format.value if self.format else None,
            "size": len(self.content),
            "violations": [v.to_dict() for v in self.violations],
            "error": self.error,
            "errorBlockId": self.error_block_id,
            "warnings": list(self.warnings),
            "pageCount": self.plan.page_count if self.plan else None,
            "checksum": self.checksum,
        }


@dataclass(frozen=True)
class PreparedDocument:
    """Everything rendering needs, shared by every output format of one document"""
    validated: ValidatedDocument
    styles: Dict[str, ResolvedStyle]
    document_style: ResolvedStyle
    visuals: AdvancedVisualElements
    plan: LayoutPlan
    toc: Tuple[TocEntry, ...]
    config: LayoutConfig


class LayoutAgent:
    """
    Layout core orchestrator.

    Responsibilities:
    1. Validate the document contract
    2. Resolve styles and generate visual elements
    3. Execute block flow (pagination)
    4. Render to output formats (PDF, HTML, DOCX)

    Usage:
        agent = LayoutAgent()
        result = agent.process(document, LayoutConfig(), RenderOptions(format=OutputFormat.PRINT_PAGINATED))
        if result.ok:
            Path("notes.pdf").write_bytes(result.content)

        # Several formats from one layout pass:
        results = agent.render_many(document, ["pdf", "html", "docx"])
    """

    def __init__(self, max_workers: int = 2):
        self.validator = ContractValidator()
        self.resolver = StyleResolver()
        self.enhancer = VisualEnhancer()
        self.max_workers = max_workers

    def prepare(
        self,
        document: DocumentInput,
        config: LayoutConfig,
        options: RenderOptions,
    ) -> PreparedDocument:
        """
        Validate and lay out a document.

        Raises:
            DocumentValidationError: if the document breaks any invariant
            ConfigurationError: if the layout configuration is invalid
        """
        # Numeric problems are reported before any layout work
        config.validate_or_raise()

        validated = document if isinstance(document, ValidatedDocument) else self.validator.validate_or_raise(document)
        validated = self._apply_template(validated, options.template)

        # Style resolution and enhancement both depend only on the document
        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="layout") as pool:
            styles_future = pool.submit(self.resolver.resolve_all, validated)
            visuals_future = pool.submit(self.enhancer.enhance, validated, options.design_style, options.color_scheme)
            styles = styles_future.result()
            visuals = visuals_future.result()

        document_style = self.resolver.resolve_document(validated.styles)
        executor = BlockFlowExecutor(config, page_size=document_style.page_size)
        plan = executor.execute(validated, styles)
        toc = build_toc(validated, plan)

        return PreparedDocument(
            validated=validated,
            styles=styles,
            document_style=document_style,
            visuals=visuals,
            plan=plan,
            toc=tuple(toc),
            config=config,
        )

    def _apply_template(self, validated: ValidatedDocument, template: Optional[str]) -> ValidatedDocument:
        """A template selector overrides the document's theme"""
        theme = resolve_theme_name(template, validated.styles.theme)
        if theme == validated.styles.theme:
            if template and template != theme.value:
                logger.warning(f"Unknown template '{template}', keeping theme {theme.value}")
            return validated
        logger.info(f"Template '{template}' overrides theme {validated.styles.theme.value}")
        styles = replace(validated.styles, theme=theme)
        document = replace(validated.document, styles=styles)
        return ValidatedDocument(document=document, checksum=document.checksum())

    def render_prepared(self, prepared: PreparedDocument, options: RenderOptions) -> RenderResult:
        """Render an already laid-out document"""
        renderer = get_renderer(options.format)
        try:
            output = renderer.render(
                prepared.validated,
                prepared.styles,
                prepared.document_style,
                prepared.plan,
                prepared.visuals,
                options,
                prepared.config,
                list(prepared.toc),
            )
        except RenderBackendError as e:
            logger.error(f"Render failed: {e}")
            return RenderResult(
                ok=False,
                format=options.format,
                error=str(e),
                error_block_id=e.block_id,
                plan=prepared.plan,
                checksum=prepared.validated.checksum,
            )
        return RenderResult(
            ok=True,
            format=options.format,
            content=output.content,
            warnings=list(output.warnings),
            plan=prepared.plan,
            checksum=prepared.validated.checksum,
        )

    def process(
        self,
        document: DocumentInput,
        config: Union[LayoutConfig, Mapping[str, Any], None] = None,
        options: Union[RenderOptions, Mapping[str, Any], None] = None,
    ) -> RenderResult:
        """
        Run the full pipeline for one output format.

        Never raises for contract, configuration or backend errors; they
        are reported on the returned RenderResult.
        """
        logger.info("=== Layout Core Processing ===")
        try:
            config = self._config(config)
            options = self._options(options)
            prepared = self.prepare(document, config, options)
        except DocumentValidationError as e:
            return RenderResult(ok=False, format=self._format_of(options), violations=list(e.violations), error=str(e))
        except ConfigurationError as e:
            logger.warning(f"Configuration rejected: {e}")
            return RenderResult(ok=False, format=self._format_of(options), error=str(e))

        result = self.render_prepared(prepared, options)
        logger.info(f"=== Layout Core Processing Complete: ok={result.ok}, {len(result.content)} bytes ===")
        return result

    def render_many(
        self,
        document: DocumentInput,
        formats: Iterable[Union[str, OutputFormat]],
        config: Union[LayoutConfig, Mapping[str, Any], None] = None,
        options: Union[RenderOptions, Mapping[str, Any], None] = None,
    ) -> Dict[OutputFormat, RenderResult]:
        """
        Render one document into several formats, sharing validation,
        style resolution, enhancement and layout.

        Raises:
            ConfigurationError: if a format name is unknown
        """
        try:
            targets = list(dict.fromkeys(OutputFormat.parse(f) for f in formats))
        except ValueError as e:
            raise ConfigurationError([str(e)]) from e

        try:
            config = self._config(config)
            options = self._options(options)
            prepared = self.prepare(document, config, options)
        except DocumentValidationError as e:
            return {
                fmt: RenderResult(ok=False, format=fmt, violations=list(e.violations), error=str(e))
                for fmt in targets
            }
        except ConfigurationError as e:
            return {fmt: RenderResult(ok=False, format=fmt, error=str(e)) for fmt in targets}

        results = {}
        for fmt in targets:
            results[fmt] = self.render_prepared(prepared, replace(options, format=fmt))
        logger.info(f"Multi-format export: {', '.join(f.value for f in targets)}")
        return results

    @staticmethod
    def _config(config: Union[LayoutConfig, Mapping[str, Any], None]) -> LayoutConfig:
        if isinstance(config, LayoutConfig):
            return config
        return LayoutConfig.from_dict(dict(config) if config else None)

    @staticmethod
    def _options(options: Union[RenderOptions, Mapping[str, Any], None]) -> RenderOptions:
        if isinstance(options, RenderOptions):
            return options
        return RenderOptions.from_dict(dict(options) if options else None)

    @staticmethod
    def _format_of(options: Any) -> Optional[OutputFormat]:
        return options.format if isinstance(options, RenderOptions) else None


def render_document(
    document: DocumentInput,
    layout_config: Union[LayoutConfig, Mapping[str, Any], None] = None,
    render_options: Union[RenderOptions, Mapping[str, Any], None] = None,
) -> RenderResult:
    """
    renderDocument(document, layoutConfig, renderOptions) -> bytes or errors.

    Usage:
        result = render_document(payload, {"baseFontSize": 12}, {"format": "pdf"})
    """
    return LayoutAgent().process(document, layout_config, render_options)
