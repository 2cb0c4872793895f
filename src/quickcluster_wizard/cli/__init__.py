"""CLI utilities for quickcluster-wizard.

This module provides Rich-based formatting utilities for the ``qcw``
commands.
"""

from quickcluster_wizard.cli.formatting import (
    create_settings_table,
    format_error,
    format_success,
    format_warning,
    parse_assignments,
)

__all__ = [
    "create_settings_table",
    "format_error",
    "format_success",
    "format_warning",
    "parse_assignments",
]
