"""Tests for the pattern scanner and line splitting."""

import re
import time

import pytest

from guardian_scan.lines import split_lines
from guardian_scan.models import Category, Finding, Rule
from guardian_scan.rules import RULES
from guardian_scan.scanner import detect


ARITHMETIC_CODE = "\n".join([
    "a = 1",
    "b = 2",
    "c = a + b",
    "d = c * 3",
    "e = d - a",
    "f = e / 2",
    "g = f ** 2",
    "h = g % 7",
    "i = h + a + b",
    "total = i * 10",
])


def _sample_rule(rule_id: str, pattern: str) -> Rule:
    return Rule(
        id=rule_id,
        matcher=re.compile(pattern),
        vulnerability_type=rule_id.title(),
        category=Category.code_quality,
        description="d",
        explanation="e",
        mitigation="m",
        safe_code="s",
    )


class TestSplitLines:
    """Test the shared line-splitting convention."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("", []),
            ("one", ["one"]),
            ("one\ntwo", ["one", "two"]),
            ("one\ntwo\n", ["one", "two"]),
            ("one\n\n", ["one", ""]),
            ("\n", [""]),
            ("one\r\ntwo\r\n", ["one", "two"]),
            ("a b", ["a b"]),
        ],
    )
    def test_split_lines(self, text, expected):
        assert split_lines(text) == expected


class TestDetectScenarios:
    """End-to-end detection scenarios."""

    def test_eval(self):
        findings = detect("eval(userInput);", "app.js")

        assert len(findings) == 1
        finding = findings[0]
        assert finding.type == "Dynamic Code Execution"
        assert finding.category == "Code Injection"
        assert finding.line_number == 1
        assert finding.file_name == "app.js"
        assert finding.unsafe_code == "eval(userInput);"
        assert finding.safe_code == "JSON.parse(userInput); // For JSON data"

    def test_inner_html(self):
        findings = detect("element.innerHTML = userInput;", "app.js")

        assert len(findings) == 1
        assert findings[0].category == Category.cross_site_scripting
        assert findings[0].line_number == 1

    def test_math_random(self):
        findings = detect("const token = Math.random().toString(36);", "app.js")

        assert len(findings) == 1
        assert findings[0].type == "Insecure Randomness"
        assert findings[0].category == "Cryptography"

    def test_hardcoded_password(self):
        findings = detect('password = "admin123"', "auth.py")

        assert len(findings) == 1
        assert findings[0].type == "Hardcoded Credentials"
        assert findings[0].category == "Sensitive Data"
        assert findings[0].file_name == "auth.py"

    def test_clean_code(self):
        assert detect(ARITHMETIC_CODE, "math.py") == []

    def test_empty_text(self):
        assert detect("", "empty.js") == []

    def test_two_lines_two_findings(self):
        findings = detect("eval(x);\nelement.innerHTML=y;", "app.js")

        assert [f.line_number for f in findings] == [1, 2]
        assert findings[0].type == "Dynamic Code Execution"
        assert findings[1].category == "Cross-Site Scripting"


class TestDetectBehaviour:
    """Test ordering, ids and isolation."""

    def test_unsafe_code_is_trimmed(self):
        findings = detect("    eval(x);   \n", "app.js")
        assert findings[0].unsafe_code == "eval(x);"

    def test_crlf_line_numbers(self):
        findings = detect("a = 1\r\neval(x);\r\n", "app.js")
        assert findings[0].line_number == 2
        assert findings[0].unsafe_code == "eval(x);"

    def test_multiple_rules_on_one_line_follow_catalog_order(self):
        """Test a line matched by several rules yields one finding per rule."""
        line = "el.innerHTML = eval(req.body.html);"
        findings = detect(line, "app.js")

        types = [f.type for f in findings]
        assert types == ["Dynamic Code Execution", "Cross-Site Scripting (XSS)", "Missing Input Validation"]
        assert {f.line_number for f in findings} == {1}

        catalog_ids = [r.id for r in RULES]
        positions = [catalog_ids.index(f.id.rsplit("-", 2)[0]) for f in findings]
        assert positions == sorted(positions)

    def test_findings_ordered_by_line_then_rule(self):
        text = "element.innerHTML = x;\neval(y);\nel.innerHTML = eval(z);"
        findings = detect(text, "app.js")

        keys = [(f.line_number, f.type) for f in findings]
        assert keys == [
            (1, "Cross-Site Scripting (XSS)"),
            (2, "Dynamic Code Execution"),
            (3, "Dynamic Code Execution"),
            (3, "Cross-Site Scripting (XSS)"),
        ]

    def test_ids_are_deterministic_and_unique(self):
        text = "eval(a);\neval(b);\nelement.innerHTML = c;"
        first = detect(text, "app.js")
        second = detect(text, "app.js")

        assert first == second
        assert [f.id for f in first] == [
            "dynamic-code-execution-1-1",
            "dynamic-code-execution-2-2",
            "cross-site-scripting-3-1",
        ]
        assert len({f.id for f in first}) == len(first)

    def test_file_name_does_not_select_rules(self):
        code = 'password = "hunter2"'
        assert [f.type for f in detect(code, "notes.txt")] == [f.type for f in detect(code, "app.py")]

    def test_custom_rules(self):
        rules = (_sample_rule("foo-call", r"\bfoo\("),)
        findings = detect("foo(1)\nbar(2)\nfoo(3)", "x.js", rules=rules)

        assert [f.line_number for f in findings] == [1, 3]
        assert [f.id for f in findings] == ["foo-call-1-1", "foo-call-3-2"]

    def test_failing_matcher_is_isolated(self, caplog):
        """Test a rule that cannot be evaluated counts as no match and the scan continues."""

        class ExplodingPattern:
            pattern = "boom"

            def search(self, line):
                raise RecursionError("maximum recursion depth exceeded")

        fields = _sample_rule("exploding", "x").model_dump()
        fields["matcher"] = ExplodingPattern()
        exploding = Rule.model_construct(**fields)
        rules = (exploding, _sample_rule("foo-call", r"\bfoo\("))

        findings = detect("foo(1)", "x.js", rules=rules)

        assert [f.id for f in findings] == ["foo-call-1-1"]
        assert "exploding" in caplog.text

    def test_long_line_is_tolerated(self):
        line = "x" * 200_000 + " eval(payload);"
        findings = detect(line, "big.js")
        assert len(findings) == 1

    @pytest.mark.parametrize(
        "line",
        [
            "except" + " " * 5000 + "x",
            "except " * 5000,
            "print(" * 8000,
            "subprocess.run(" * 3000,
            "open(" * 8000,
            "yaml.load(" * 4000,
            "catch (" * 5000,
            "'SELECT " * 5000,
            'password = "' * 4000,
        ],
    )
    def test_adversarial_line_scans_quickly(self, line):
        start = time.perf_counter()
        detect(line, "slow.py")
        assert time.perf_counter() - start < 1.0

    def test_findings_are_immutable(self):
        finding = detect("eval(x);", "app.js")[0]
        with pytest.raises(Exception):
            finding.line_number = 5

    def test_wire_names(self):
        finding = detect("eval(x);", "app.js")[0]
        data = finding.model_dump(by_alias=True)

        assert set(data) == {
            "id", "fileName", "lineNumber", "type", "description", "mitigation",
            "unsafeCode", "safeCode", "explanation", "category",
        }
        assert data["category"] == "Code Injection"


class TestDetectProperties:
    """Invariants that hold for any input."""

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "\n",
            ARITHMETIC_CODE,
            "eval(a);\neval(b);\n\n",
            "el.innerHTML = eval(req.body.html);\n" * 5,
            'password = "x"\r\nDEBUG = True\r\n',
        ],
    )
    def test_line_numbers_within_bounds(self, text):
        total = len(split_lines(text))
        for finding in detect(text, "f.js"):
            assert isinstance(finding, Finding)
            assert 1 <= finding.line_number <= total
