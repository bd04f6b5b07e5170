"""Region-scoped cloud compliance rules evaluated against cached API responses."""

from .models import Finding, FindingSeverity
from .service import ScanResult, ScanService

__all__ = ["Finding", "FindingSeverity", "ScanResult", "ScanService"]
