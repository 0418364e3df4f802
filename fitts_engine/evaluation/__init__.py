"""Post-session analysis of trial tables.

``plotting`` needs matplotlib (the ``plot`` extra) and is imported on demand.
"""

from .summary import summarize_sets, summarize_blocks, fitts_regression

__all__ = [
    "summarize_sets",
    "summarize_blocks",
    "fitts_regression",
]
