"""Output formatting for loaded packages."""

from .reporter import PackageReporter, format_json, format_text

__all__ = ["PackageReporter", "format_json", "format_text"]
