"""Pydantic models for guardian-scan."""

import re
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Category(str, Enum):
    """Closed set of classification labels for rules and findings."""

    code_injection = "Code Injection"
    cross_site_scripting = "Cross-Site Scripting"
    cryptography = "Cryptography"
    sensitive_data = "Sensitive Data"
    authentication = "Authentication"
    input_validation = "Input Validation"
    file_system = "File System"
    configuration = "Configuration"
    code_quality = "Code Quality"


class _WireModel(BaseModel):
    """Base for models exposed to callers with camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        use_enum_values=True,
    )


class Rule(BaseModel):
    """A single detection rule from the catalog."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Stable slug, e.g. 'dynamic-code-execution'")
    matcher: re.Pattern[str] = Field(description="Pattern tested against a single line")
    vulnerability_type: str = Field(description="Human-readable name of the issue")
    category: Category
    description: str = Field(description="What the issue is")
    explanation: str = Field(description="Why the issue matters")
    mitigation: str = Field(description="How to fix it")
    safe_code: str = Field(description="Snippet showing the secure alternative")


class Finding(_WireModel):
    """One match of a rule against one line of input."""

    id: str = Field(description="Unique within a scan: '{rule_id}-{line}-{occurrence}'")
    file_name: str
    line_number: int = Field(ge=1, description="1-based line index")
    type: str = Field(description="Vulnerability type of the matching rule")
    category: Category
    description: str
    mitigation: str
    explanation: str
    unsafe_code: str = Field(description="The matched line, trimmed")
    safe_code: str


class Metrics(_WireModel):
    """Line-count metrics and the resulting health percentage."""

    total_lines: int = Field(ge=0)
    vulnerable_lines: int = Field(ge=0)
    clean_lines: int = Field(ge=0)
    code_health_percentage: int = Field(ge=0, le=100)


class CodeMetrics(_WireModel):
    """Metrics block embedded in a scan result."""

    clean_lines: int
    vulnerable_lines: int
    code_health_percentage: int


class ScanSummary(_WireModel):
    total: int = Field(default=0, description="Number of findings")


class ScanResult(_WireModel):
    """A complete scan: findings, metrics and caller-side metadata."""

    id: str = Field(description="Unique identifier for this scan")
    timestamp: datetime
    file_name: str
    vulnerabilities: list[Finding] = Field(default_factory=list)
    summary: ScanSummary = Field(default_factory=ScanSummary)
    total_lines: int
    code_metrics: CodeMetrics


class ScanRequest(_WireModel):
    """Request body for the /scan and /export endpoints."""

    code: str = Field(description="Source text to scan")
    file_name: str | None = Field(default=None, description="File name hint, used for reporting only")


class RuleInfo(_WireModel):
    """Public view of a catalog rule."""

    id: str
    type: str
    category: Category
    description: str
    explanation: str
    mitigation: str
    safe_code: str
    pattern: str
