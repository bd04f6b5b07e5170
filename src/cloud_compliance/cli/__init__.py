"""Command-line interface package for the compliance tooling."""

from .app import (
    ScanReport,
    build_parser,
    create_service,
    main,
    render_rules_table,
    render_table,
    run,
)

__all__ = [
    "ScanReport",
    "build_parser",
    "create_service",
    "main",
    "render_rules_table",
    "render_table",
    "run",
]
