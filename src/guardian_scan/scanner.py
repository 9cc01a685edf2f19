"""Line-by-line pattern scanner."""

import logging
import re
from collections import Counter

from .lines import split_lines
from .models import Finding, Rule
from .rules import load_rules

logger = logging.getLogger(__name__)


def _matches(rule: Rule, line: str, line_number: int) -> bool:
    """Test one rule against one line, treating a failed evaluation as no match."""
    try:
        return rule.matcher.search(line) is not None
    except (re.error, RecursionError) as e:
        logger.warning(f"Rule {rule.id} could not be evaluated on line {line_number}: {e}")
        return False


def _to_finding(rule: Rule, file_name: str, line_number: int, line: str, occurrence: int) -> Finding:
    return Finding(
        id=f"{rule.id}-{line_number}-{occurrence}",
        file_name=file_name,
        line_number=line_number,
        type=rule.vulnerability_type,
        category=rule.category,
        description=rule.description,
        mitigation=rule.mitigation,
        explanation=rule.explanation,
        unsafe_code=line.strip(),
        safe_code=rule.safe_code,
    )


def detect(text: str, file_name: str, rules: tuple[Rule, ...] | None = None) -> list[Finding]:
    """
    Scan source text for insecure coding patterns.

    Every line is tested against every rule. Each (line, rule) match yields one
    Finding; results are ordered by line number, then by catalog order.

    Args:
        text: Source text to scan. May be empty.
        file_name: Name copied into each finding. Never used to select rules.
        rules: Rules to apply. Defaults to the built-in catalog.

    Returns:
        List of Finding objects
    """
    catalog = load_rules() if rules is None else rules
    lines = split_lines(text)

    findings: list[Finding] = []
    occurrences: Counter[str] = Counter()

    for line_number, line in enumerate(lines, start=1):
        for rule in catalog:
            if not _matches(rule, line, line_number):
                continue
            occurrences[rule.id] += 1
            findings.append(_to_finding(rule, file_name, line_number, line, occurrences[rule.id]))

    logger.debug(
        f"Scanned {file_name}: {len(lines)} lines, {len(catalog)} rules, {len(findings)} findings"
    )
    return findings
