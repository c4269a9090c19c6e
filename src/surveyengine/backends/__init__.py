"""Backends for survey engine output generation (CSV, JSON exports)."""

from .export import ExportFormat, export_filename, export_responses, save_export_file

__all__ = ["ExportFormat", "export_filename", "export_responses", "save_export_file"]
