# src/atlas_converge/report/__init__.py
"""Relatórios derivados de uma run concluída (report.md)."""

from .report_md import REQUIRED_SECTIONS, generate_report_md  # noqa: F401
