"""Guardian Code Scan: line-based security pattern scanner with code health metrics."""

__version__ = "1.0.0"

from .health import metrics
from .models import Category, Finding, Metrics, Rule, ScanResult
from .rules import RuleCatalogError, load_rules
from .scanner import detect

__all__ = [
    "Category",
    "Finding",
    "Metrics",
    "Rule",
    "RuleCatalogError",
    "ScanResult",
    "detect",
    "load_rules",
    "metrics",
]
