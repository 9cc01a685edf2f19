"""
Rule catalog: the regex patterns used to DETECT insecure coding patterns in
scanned source text, together with the remediation content reported for each.
These patterns are only ever matched against text. Nothing here executes the
operations it scans for.

Patterns are case-sensitive and tested against one line at a time. Catalog
order is the tie-break order when several rules match the same line. Gaps
between tokens are bounded so a search stays linear in the line length.
"""

import re

from pydantic import ValidationError

from .models import Category, Rule


class RuleCatalogError(ValueError):
    """Raised when the rule table is malformed (bad pattern, duplicate id)."""


# Upper-case SQL verbs only; lower-case SQL in string literals is too noisy.
_SQL_VERBS = r"(?:SELECT|INSERT|UPDATE|DELETE|DROP)"

_RULE_DEFINITIONS: tuple[dict[str, str | Category], ...] = (
    # --- Code injection ---
    {
        "id": "dynamic-code-execution",
        "pattern": (
            r"(?<![\w.$])(?:eval|exec)\s*\("
            r"|\bnew\s+Function\s*\("
            r"|\bset(?:Timeout|Interval)\s*\(\s*[\"'`]"
        ),
        "vulnerability_type": "Dynamic Code Execution",
        "category": Category.code_injection,
        "description": "Use of eval() function allows arbitrary code execution",
        "explanation": "Dynamic code execution vulnerabilities occur when user input is directly executed as code.",
        "mitigation": "Avoid using eval(). Use JSON.parse() for JSON data or implement proper parsing.",
        "safe_code": "JSON.parse(userInput); // For JSON data",
    },
    {
        "id": "cross-site-scripting",
        "pattern": (
            r"\.(?:innerHTML|outerHTML)\s*=(?!=)"
            r"|\bdocument\.write(?:ln)?\s*\("
            r"|\bdangerouslySetInnerHTML\b"
            r"|\.insertAdjacentHTML\s*\("
        ),
        "vulnerability_type": "Cross-Site Scripting (XSS)",
        "category": Category.cross_site_scripting,
        "description": "Dynamic HTML generation without proper sanitization",
        "explanation": "XSS vulnerabilities allow attackers to inject malicious scripts into web pages.",
        "mitigation": "Use textContent instead of innerHTML or properly sanitize user input.",
        "safe_code": "element.textContent = userInput;",
    },
    # --- Cryptography ---
    {
        "id": "insecure-randomness",
        "pattern": (
            r"\bMath\.random\s*\("
            r"|\brandom\.(?:random|randint|randrange|choice|getrandbits)\s*\("
        ),
        "vulnerability_type": "Insecure Randomness",
        "category": Category.cryptography,
        "description": "Math.random() is not cryptographically secure",
        "explanation": (
            "Using predictable random number generators for security purposes "
            "can lead to cryptographic weaknesses."
        ),
        "mitigation": "Use crypto.randomBytes() or crypto.getRandomValues() for security purposes.",
        "safe_code": 'const crypto = require("crypto");\nconst token = crypto.randomBytes(32).toString("hex");',
    },
    # --- Sensitive data ---
    {
        "id": "hardcoded-credentials",
        "pattern": (
            r"(?:password|passwd|pwd|secret|api_?key|apiKey|access_?token|auth_?token"
            r"|PASSWORD|PASSWD|SECRET|API_KEY|ACCESS_TOKEN)"
            r"[\"']?\s*[:=]\s*[\"'][^\"']{1,200}[\"']"
        ),
        "vulnerability_type": "Hardcoded Credentials",
        "category": Category.sensitive_data,
        "description": "Hardcoded passwords found in source code",
        "explanation": "Hardcoded credentials in source code pose significant security risks.",
        "mitigation": "Use environment variables or secure configuration files for credentials.",
        "safe_code": 'password = os.environ.get("PASSWORD")',
    },
    {
        "id": "sql-injection",
        "pattern": (
            rf"[\"'`]\s*{_SQL_VERBS}\b[^\"'`]{{0,500}}[\"'`]\s*(?:\+|%\s*[\w(])"
            rf"|\bf[\"']{_SQL_VERBS}\b[^\"']{{0,500}}\{{"
            rf"|`{_SQL_VERBS}\b[^`]{{0,500}}\$\{{"
            rf"|[\"']{_SQL_VERBS}\b[^\"']{{0,500}}[\"']\s*\.format\s*\("
        ),
        "vulnerability_type": "SQL Injection",
        "category": Category.code_injection,
        "description": "SQL query built by concatenating or interpolating values into the query string",
        "explanation": (
            "When user-controlled values are spliced into SQL text, an attacker can change "
            "the structure of the query and read or modify arbitrary data."
        ),
        "mitigation": "Use parameterized queries or an ORM. Never build SQL from string concatenation.",
        "safe_code": 'cursor.execute("SELECT * FROM users WHERE id = %s", (user_id,))',
    },
    {
        "id": "command-injection",
        "pattern": (
            r"\bos\.(?:system|popen)\s*\("
            r"|\bsubprocess\.\w+\s*\([^)]{0,200}shell\s*=\s*True"
            r"|\bchild_process\.exec(?:Sync)?\s*\("
            r"|\bexecSync\s*\("
            r"|\bshell_exec\s*\("
        ),
        "vulnerability_type": "Command Injection",
        "category": Category.code_injection,
        "description": "Shell command executed through an interpreter that may receive untrusted input",
        "explanation": (
            "Passing strings to a shell lets metacharacters such as ; | and $() in user "
            "input run additional commands on the host."
        ),
        "mitigation": "Call the program directly with an argument list and shell=False, and validate every argument.",
        "safe_code": 'subprocess.run(["ls", "-l", directory], check=True)',
    },
    # --- Input validation ---
    {
        "id": "path-traversal",
        "pattern": (
            r"\b(?:readFile(?:Sync)?|createReadStream|sendFile|open|path\.join|os\.path\.join)\s*\("
            r"[^)]{0,200}(?:req\.(?:params|query|body)|request\.(?:args|form|GET|POST|files)|\.\./)"
        ),
        "vulnerability_type": "Path Traversal",
        "category": Category.input_validation,
        "description": "File path built from request data or relative parent segments",
        "explanation": (
            "Sequences like ../ in a user-supplied path let an attacker read or overwrite "
            "files outside the intended directory."
        ),
        "mitigation": (
            "Resolve the path against a fixed base directory and reject it unless the "
            "result stays inside that directory."
        ),
        "safe_code": (
            "safe = (BASE_DIR / name).resolve()\n"
            "if not safe.is_relative_to(BASE_DIR):\n"
            "    raise ValueError(\"invalid path\")"
        ),
    },
    {
        "id": "missing-input-validation",
        "pattern": (
            r"\breq\.(?:body|query|params)\.\w+"
            r"|\brequest\.(?:args|form|GET|POST)\["
            r"|\brequest\.(?:args|form)\.get\s*\("
            r"|(?<![\w.])(?:raw_)?input\s*\("
        ),
        "vulnerability_type": "Missing Input Validation",
        "category": Category.input_validation,
        "description": "Request or console input used directly without validation",
        "explanation": (
            "Input that is never checked for type, length or format is the entry point "
            "for most injection attacks."
        ),
        "mitigation": "Validate input against a schema (pydantic, zod, joi) before using it.",
        "safe_code": "payload = UserCreate.model_validate(request.get_json())",
    },
    {
        "id": "unvalidated-redirect",
        "pattern": (
            r"\b(?:res\.)?redirect\s*\(\s*(?:req\.|request\.)"
            r"|\b(?:window\.)?location(?:\.href)?\s*=(?!=)\s*(?![\"'`/\s])"
        ),
        "vulnerability_type": "Unvalidated Redirect",
        "category": Category.input_validation,
        "description": "Redirect target taken from a variable or request parameter",
        "explanation": (
            "Open redirects let attackers send users to malicious sites through a "
            "trusted domain, which is commonly abused for phishing."
        ),
        "mitigation": "Redirect only to relative paths or to destinations on an explicit allowlist.",
        "safe_code": (
            'const target = ALLOWED_REDIRECTS.includes(next) ? next : "/";\n'
            "res.redirect(target);"
        ),
    },
    # --- File system ---
    {
        "id": "insecure-file-operations",
        "pattern": (
            r"\bchmod(?:Sync)?\s*\([^)]{0,200}\b0?o?777\b"
            r"|\bmktemp\s*\("
            r"|\bumask\s*\(\s*0o?0*\s*\)"
        ),
        "vulnerability_type": "Insecure File Operations",
        "category": Category.file_system,
        "description": "World-writable permissions or predictable temporary file names",
        "explanation": (
            "Files created with permissive modes or racy temporary names can be read "
            "or replaced by other users on the same machine."
        ),
        "mitigation": "Use restrictive file modes (0o600/0o700) and tempfile.mkstemp() or NamedTemporaryFile().",
        "safe_code": "fd, path = tempfile.mkstemp()\nos.chmod(path, 0o600)",
    },
    {
        "id": "insecure-deserialization",
        "pattern": (
            r"\b(?:c?[Pp]ickle|marshal)\.loads?\s*\("
            r"|\byaml\.load\s*\((?![^)]{0,200}SafeLoader)"
            r"|\bunserialize\s*\("
        ),
        "vulnerability_type": "Insecure Deserialization",
        "category": Category.code_injection,
        "description": "Deserializer that can instantiate arbitrary objects",
        "explanation": (
            "Formats such as pickle and unsafe YAML can run code while loading, so "
            "deserializing untrusted data is equivalent to executing it."
        ),
        "mitigation": "Use a data-only format such as JSON, or yaml.safe_load() for YAML.",
        "safe_code": "data = yaml.safe_load(stream)",
    },
    # --- Authentication ---
    {
        "id": "authentication-bypass",
        "pattern": (
            r"(?:password|passwd|pwd|PASSWORD)\s*===?\s*[\"'][^\"']{0,200}[\"']"
            r"|\b(?:isAdmin|is_admin|isAuthenticated|is_authenticated)\s*=\s*(?:true|True)\b"
        ),
        "vulnerability_type": "Authentication Bypass",
        "category": Category.authentication,
        "description": "Password compared against a literal or authentication flag forced on",
        "explanation": (
            "Hardcoded comparisons and forced flags create a backdoor that works for "
            "anyone who reads the source."
        ),
        "mitigation": "Verify credentials against stored salted hashes and derive privileges from the session.",
        "safe_code": "if bcrypt.checkpw(password.encode(), user.password_hash):",
    },
    {
        "id": "insecure-token-verification",
        "pattern": (
            r"\bjwt\.decode\s*\([^)]{0,200}verify\s*=\s*False"
            r"|[\"']verify_signature[\"']\s*:\s*False"
            r"|\balgorithms?\s*[:=]\s*\[?\s*[\"']none[\"']"
            r"|\bjwt\.decode\s*\(\s*\w+\s*\)"
        ),
        "vulnerability_type": "Insecure Token Verification",
        "category": Category.authentication,
        "description": "JWT decoded without verifying its signature",
        "explanation": "An unverified token can be forged by anyone, which bypasses authentication entirely.",
        "mitigation": "Always verify the signature with a fixed list of accepted algorithms.",
        "safe_code": 'claims = jwt.decode(token, SECRET_KEY, algorithms=["HS256"])',
    },
    # --- Cryptography ---
    {
        "id": "weak-cryptography",
        "pattern": (
            r"\bhashlib\.(?:md5|sha1)\s*\("
            r"|\bcreateHash\s*\(\s*[\"'](?:md5|sha1|MD5|SHA1)[\"']"
            r"|\b(?:MD5|SHA|DES|ARC4)\.new\s*\("
            r"|\bAES\.MODE_ECB\b"
            r"|[\"'](?:aes-\d+-ecb|des-ede3?|des-cbc|rc4)[\"']"
            r"|\bCryptoJS\.(?:MD5|SHA1|DES|RC4)\b"
        ),
        "vulnerability_type": "Weak Cryptography",
        "category": Category.cryptography,
        "description": "Broken hash function or cipher mode in use",
        "explanation": (
            "MD5, SHA-1, DES, RC4 and ECB mode have practical attacks and no longer "
            "protect integrity or confidentiality."
        ),
        "mitigation": "Use SHA-256 or better for hashing, a password KDF for passwords, and AES-GCM for encryption.",
        "safe_code": "digest = hashlib.sha256(data).hexdigest()",
    },
    # --- Sensitive data ---
    {
        "id": "information-disclosure",
        "pattern": (
            r"\b(?:console\.(?:log|info|debug|error)|print|logger\.\w+|logging\.\w+)\s*\("
            r"[^)]{0,200}\b(?:password|passwd|secret|token|apiKey|api_key)\b"
            r"|\btraceback\.print_exc\s*\("
            r"|\bres\.(?:send|json)\s*\(\s*(?:err|error)(?:\.stack)?\s*\)"
            r"|\b(?:err|error)\.stack\b"
        ),
        "vulnerability_type": "Information Disclosure",
        "category": Category.sensitive_data,
        "description": "Secrets or stack traces written to logs or responses",
        "explanation": (
            "Stack traces and logged secrets reveal internals and credentials to anyone "
            "with access to the output."
        ),
        "mitigation": "Log a generic message with an error id and keep secrets and traces out of responses.",
        "safe_code": 'logger.error("login failed for user_id=%s", user_id)',
    },
    # --- Configuration ---
    {
        "id": "debug-mode-enabled",
        "pattern": (
            r"\bDEBUG\s*=\s*True\b"
            r"|\bapp\.run\s*\([^)]{0,200}debug\s*=\s*True"
            r"|\bapp\.debug\s*=\s*True\b"
            r"|\bdebug\s*:\s*true\b"
        ),
        "vulnerability_type": "Debug Mode Enabled",
        "category": Category.configuration,
        "description": "Debug mode switched on in application configuration",
        "explanation": (
            "Debug mode exposes interactive consoles, stack traces and settings that "
            "must never be reachable in production."
        ),
        "mitigation": "Read the debug flag from the environment and default it to off.",
        "safe_code": 'DEBUG = os.environ.get("DEBUG", "false").lower() == "true"',
    },
    {
        "id": "tls-verification-disabled",
        "pattern": (
            r"\b(?:requests|httpx|session|client)\.\w+\s*\([^)]{0,200}verify\s*=\s*False"
            r"|\bverify_mode\s*=\s*ssl\.CERT_NONE\b"
            r"|\b_create_unverified_context\s*\("
            r"|\brejectUnauthorized\s*:\s*false\b"
            r"|NODE_TLS_REJECT_UNAUTHORIZED[\"']?\]?\s*=\s*[\"']?0"
        ),
        "vulnerability_type": "TLS Verification Disabled",
        "category": Category.configuration,
        "description": "Certificate verification turned off for outbound connections",
        "explanation": "Without certificate checks any network attacker can intercept and modify the traffic.",
        "mitigation": "Keep verification on and point the client at the correct CA bundle if needed.",
        "safe_code": 'requests.get(url, verify="/etc/ssl/certs/ca-bundle.crt", timeout=10)',
    },
    {
        "id": "insecure-transport",
        "pattern": r"[\"'`]http://(?!localhost\b|127\.0\.0\.1\b|0\.0\.0\.0\b|\[::1\])",
        "vulnerability_type": "Insecure Transport",
        "category": Category.configuration,
        "description": "Plain HTTP URL used for a non-local endpoint",
        "explanation": "Traffic over plain HTTP can be read and altered by anyone on the network path.",
        "mitigation": "Use https:// for every remote endpoint.",
        "safe_code": 'API_URL = "https://api.example.com"',
    },
    {
        "id": "permissive-cors",
        "pattern": (
            r"Access-Control-Allow-Origin[\"']?\s*[,:]\s*[\"']\*[\"']"
            r"|\ballow_origins\s*=\s*\[\s*[\"']\*[\"']\s*\]"
            r"|\borigin\s*:\s*[\"']\*[\"']"
            r"|\bcors\s*\(\s*\)"
            r"|\bCORS_ORIGIN_ALLOW_ALL\s*=\s*True\b"
        ),
        "vulnerability_type": "Permissive CORS Policy",
        "category": Category.configuration,
        "description": "Cross-origin requests allowed from any origin",
        "explanation": "A wildcard CORS policy lets any website call the API from a victim's browser.",
        "mitigation": "List the exact origins that need access.",
        "safe_code": 'allow_origins=["https://app.example.com"]',
    },
    # --- Code quality ---
    {
        "id": "empty-exception-handler",
        "pattern": (
            r"\bexcept\b[^:]{0,200}:\s*pass\b"
            r"|\bcatch\s*(?:\([^)]{0,200}\))?\s*\{\s*\}"
        ),
        "vulnerability_type": "Empty Exception Handler",
        "category": Category.code_quality,
        "description": "Exception caught and silently discarded",
        "explanation": "Swallowed errors hide failed security checks and make incidents impossible to trace.",
        "mitigation": "Handle the specific exception or log it and re-raise.",
        "safe_code": "except ValueError as exc:\n    logger.warning(\"invalid value: %s\", exc)\n    raise",
    },
    {
        "id": "unresolved-code-marker",
        "pattern": r"(?:#|//|/\*)\s*(?:TODO|FIXME|HACK|XXX)\b",
        "vulnerability_type": "Unresolved Code Marker",
        "category": Category.code_quality,
        "description": "TODO/FIXME/HACK marker left in the code",
        "explanation": "Markers often flag unfinished validation or known shortcuts that ship to production.",
        "mitigation": "Resolve the marker or track it in the issue tracker.",
        "safe_code": "# See issue #123 for the follow-up",
    },
    {
        "id": "debugger-statement",
        "pattern": r"^\s*debugger\s*;?\s*$",
        "vulnerability_type": "Debugger Statement",
        "category": Category.code_quality,
        "description": "debugger statement left in the code",
        "explanation": "A leftover debugger statement pauses execution in developer tools and signals untested code.",
        "mitigation": "Remove debugger statements before committing.",
        "safe_code": "// removed debugger statement",
    },
)


def _build_catalog(definitions: tuple[dict[str, str | Category], ...]) -> tuple[Rule, ...]:
    """Compile rule definitions into Rules, failing fast on any malformed entry."""
    rules: list[Rule] = []
    seen: set[str] = set()

    for definition in definitions:
        rule_id = str(definition.get("id", ""))
        if not rule_id:
            raise RuleCatalogError("Rule entry is missing 'id'")
        if rule_id in seen:
            raise RuleCatalogError(f"Duplicate rule id: {rule_id}")
        seen.add(rule_id)

        try:
            matcher = re.compile(str(definition["pattern"]))
        except KeyError:
            raise RuleCatalogError(f"Rule {rule_id} is missing 'pattern'") from None
        except re.error as e:
            raise RuleCatalogError(f"Rule {rule_id} has an invalid pattern: {e}") from e

        fields = {key: value for key, value in definition.items() if key != "pattern"}
        try:
            rules.append(Rule(matcher=matcher, **fields))
        except ValidationError as e:
            raise RuleCatalogError(f"Rule {rule_id} is malformed: {e}") from e

    return tuple(rules)


RULES: tuple[Rule, ...] = _build_catalog(_RULE_DEFINITIONS)


def load_rules() -> tuple[Rule, ...]:
    """Return the full ordered rule catalog."""
    return RULES
