"""
Core package init for the facedome face tracker.

Makes the `facedome` modules importable without requiring an editable install.
"""

__all__ = [
    "detectors",
    "tracking",
    "io_utils",
    "run_tracker",
    "types",
]
