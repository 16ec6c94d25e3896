#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Quick Render CLI - Render structured documents from the command line

Usage:
    python quick_render.py render notes.json -o notes.pdf
    python quick_render.py render notes.json --format html --design-style colorful --color-scheme green
    python quick_render.py render notes.json --format pdf,html,docx -o out/notes
    python quick_render.py validate notes.json
    python quick_render.py themes
"""

import sys
import json
import argparse
from pathlib import Path
from typing import Any, Dict, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from config.logging_config import setup_logger
from config.settings import settings
from core.contracts import (
    ConfigurationError,
    LayoutConfig,
    OutputFormat,
    RenderOptions,
    create_document_summary,
    load_document,
)
from core.layout import LayoutAgent, RenderResult, toc_to_text
from core.styling import list_themes


def read_json(path: str) -> Optional[Dict[str, Any]]:
    """Load a JSON document, printing the problem on failure"""
    file_path = Path(path)
    if not file_path.exists():
        print(f"❌ File not found: {file_path}")
        return None
    try:
        return json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        print(f"❌ Invalid JSON in {file_path}: {e}")
        return None


def print_violations(result: RenderResult) -> None:
    if result.violations:
        print(f"❌ Document has {len(result.violations)} problem(s):")
        for violation in result.violations:
            print(f"   - {violation.path}: {violation.message} [{violation.code}]")
    elif result.error:
        print(f"❌ {result.error}")


def layout_config_from_args(args) -> Dict[str, Any]:
    config: Dict[str, Any] = {}
    if args.config:
        loaded = read_json(args.config)
        if loaded is None:
            raise ConfigurationError([f"cannot read layout config {args.config}"])
        config.update(loaded)
    if args.base_font_size is not None:
        config["base_font_size"] = args.base_font_size
    if args.card_threshold is not None:
        config["card_threshold"] = args.card_threshold
    if args.max_line_length is not None:
        config["max_line_length"] = args.max_line_length
    return config


def output_path_for(args, output_format: OutputFormat, many: bool) -> Path:
    if args.output:
        path = Path(args.output)
        if many or not path.suffix:
            return path.with_suffix(f".{output_format.extension}")
        return path
    return Path(args.input).with_suffix(f".{output_format.extension}")


def cmd_render(args):
    """Render a document to one or more formats"""
    document = read_json(args.input)
    if document is None:
        return 1

    formats = [f.strip() for f in args.format.split(",") if f.strip()]
    options = {
        "template": args.template,
        "include_annotations": not args.no_annotations,
        "include_toc": not args.no_toc,
        "include_footnotes": not args.no_footnotes,
        "page_numbers": not args.no_page_numbers,
        "design_style": args.design_style,
        "color_scheme": args.color_scheme,
    }

    agent = LayoutAgent()
    try:
        config = layout_config_from_args(args)
        results = agent.render_many(document, formats, config, options)
    except ConfigurationError as e:
        print(f"❌ {e}")
        return 1

    exit_code = 0
    for output_format, result in results.items():
        if not result.ok:
            print_violations(result)
            exit_code = 1
            continue
        path = output_path_for(args, output_format, len(results) > 1)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(result.content)
        pages = result.plan.page_count if result.plan else 0
        print(f"✓ {output_format.value}: {path} ({len(result.content):,} bytes, {pages} page(s))")
        for warning in result.warnings:
            print(f"   ⚠ {warning}")
    return exit_code


def cmd_validate(args):
    """Validate a document and print every violation"""
    document = read_json(args.input)
    if document is None:
        return 1

    parsed, violations = load_document(document)
    if violations:
        print(f"❌ {args.input}: {len(violations)} problem(s)")
        for violation in violations:
            print(f"   - {violation.path}: {violation.message} [{violation.code}]")
        return 1

    summary = create_document_summary(parsed)
    print(f"✓ {args.input} is valid")
    print(f"   Title:       {summary['title']}")
    print(f"   Blocks:      {summary['totalBlocks']} {summary['blockTypes']}")
    print(f"   Outline:     {summary['outlineEntries']} entries")
    print(f"   Annotations: {summary['annotations']}")
    print(f"   Theme:       {summary['theme']}")
    print(f"   Checksum:    {summary['checksum']}")

    if args.toc:
        options = RenderOptions(design_style=settings.default_design_style, color_scheme=settings.default_color_scheme)
        prepared = LayoutAgent().prepare(parsed, LayoutConfig(), options)
        print(f"\nTable of contents ({prepared.plan.page_count} page(s)):")
        print(toc_to_text(list(prepared.toc)) or "   (empty)")
    return 0


def cmd_themes(args):
    """List available themes"""
    themes = list_themes()
    print(f"{len(themes)} themes:")
    for theme in themes:
        print(f"  {theme['id']:<16} {theme['name']:<16} {theme['description']}")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Note Layout Engine - render structured documents to PDF, HTML and DOCX",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Render command
    render_parser = subparsers.add_parser('render', help='Render a document')
    render_parser.add_argument('input', help='Document JSON file')
    render_parser.add_argument('--output', '-o', help='Output file (extension added per format)')
    render_parser.add_argument('--format', '-f', default='pdf',
                               help='Comma-separated formats: pdf, html, docx (or canonical names)')
    render_parser.add_argument('--template', '-t', help='Theme id overriding the document theme')
    render_parser.add_argument('--design-style', default=settings.default_design_style,
                               help='academic | modern | minimal | colorful')
    render_parser.add_argument('--color-scheme', default=settings.default_color_scheme,
                               help='blue | green | purple | orange')
    render_parser.add_argument('--config', help='Layout config JSON file')
    render_parser.add_argument('--base-font-size', type=float, help='Base font size in points')
    render_parser.add_argument('--card-threshold', type=float, help='Importance above which blocks become cards')
    render_parser.add_argument('--max-line-length', type=int, help='Maximum characters per line')
    render_parser.add_argument('--no-toc', action='store_true', help='Omit the table of contents')
    render_parser.add_argument('--no-footnotes', action='store_true', help='Omit footnotes')
    render_parser.add_argument('--no-annotations', action='store_true', help='Omit inline annotations')
    render_parser.add_argument('--no-page-numbers', action='store_true', help='Omit page numbers')

    # Validate command
    validate_parser = subparsers.add_parser('validate', help='Validate a document')
    validate_parser.add_argument('input', help='Document JSON file')
    validate_parser.add_argument('--toc', action='store_true', help='Also print the table of contents')

    # Themes command
    subparsers.add_parser('themes', help='List themes')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logger("core", log_file=None, level="DEBUG" if args.verbose else "WARNING")
    if args.verbose:
        settings.print_config()

    # Route to command handlers
    commands = {
        'render': cmd_render,
        'validate': cmd_validate,
        'themes': cmd_themes,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        print(f"Unknown command: {args.command}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
