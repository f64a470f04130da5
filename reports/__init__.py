from __future__ import annotations  # Report package exports

from .pdf import generate_marathon_report_pdf

__all__ = ["generate_marathon_report_pdf"]
