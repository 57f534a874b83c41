"""Plot recipes and table formatting."""

from .figures import line_by_group, residual_plot, save_figure, scatter_with_fit
from .tables import format_table, markdown_table

__all__ = [
    "format_table",
    "line_by_group",
    "markdown_table",
    "residual_plot",
    "save_figure",
    "scatter_with_fit",
]
