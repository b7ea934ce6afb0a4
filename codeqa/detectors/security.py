"""Security pattern detector."""

from __future__ import annotations

import re

from codeqa.detectors.base import BaseDetector, IssueFactory, Rule, compile_all
from codeqa.models import Effort, Issue, IssueType, Severity, SourceUnit

_STRING_SQL = r"\b(?:SELECT|INSERT|UPDATE|DELETE)\b[^'\"`]*['\"`]\s*\+"

SECURITY_RULES: tuple[Rule, ...] = (
    Rule(
        key="sql-injection",
        patterns=compile_all(
            r"query\s*\(\s*['\"`][^'\"`]*\$\{[^}]+\}[^'\"`]*['\"`]",
            r"execute\s*\(\s*['\"`][^'\"`]*\+[^'\"`]*['\"`]",
            r"SELECT\s+.*\+.*FROM",
            r"INSERT\s+.*\+.*VALUES",
            _STRING_SQL,
            r"(?:execute|query)\s*\(\s*f['\"][^'\"]*\b(?:SELECT|INSERT|UPDATE|DELETE)\b",
        ),
        severity=Severity.CRITICAL,
        title="Potential SQL Injection",
        description=(
            "Dynamic SQL query construction detected. "
            "This could lead to SQL injection vulnerabilities."
        ),
        suggestion="Use parameterized queries or prepared statements instead of string concatenation.",
        impact="Attackers could execute arbitrary SQL commands, potentially accessing or modifying sensitive data.",
        effort=Effort.MEDIUM,
    ),
    Rule(
        key="xss",
        patterns=compile_all(
            r"innerHTML\s*=\s*.*\+",
            r"document\.write\s*\(",
            r"\beval\s*\(",
            r"dangerouslySetInnerHTML",
        ),
        severity=Severity.HIGH,
        title="Potential XSS Vulnerability",
        description="Dynamic HTML content insertion detected without proper sanitization.",
        suggestion="Sanitize user input before inserting into DOM or use safe DOM manipulation methods.",
        impact="Attackers could inject malicious scripts that execute in users' browsers.",
        effort=Effort.MEDIUM,
    ),
    Rule(
        key="hardcoded-secret",
        patterns=compile_all(
            r"(?:password|pwd|pass)\s*[:=]\s*['\"`][^'\"`]{3,}['\"`]",
            r"(?:api[_-]?key|apikey)\s*[:=]\s*['\"`][^'\"`]{10,}['\"`]",
            r"(?:secret|token)\s*[:=]\s*['\"`][^'\"`]{10,}['\"`]",
            r"(?:private[_-]?key)\s*[:=]\s*['\"`][^'\"`]{20,}['\"`]",
        ),
        severity=Severity.CRITICAL,
        title="Hardcoded Secret Detected",
        description="Sensitive information appears to be hardcoded in the source code.",
        suggestion="Move secrets to environment variables or secure configuration files.",
        impact="Exposed credentials could lead to unauthorized access to systems and data.",
        effort=Effort.LOW,
    ),
    Rule(
        key="insecure-random",
        patterns=compile_all(
            r"Math\.random\s*\(\s*\)",
            r"\bnew\s+Random\s*\(",
            r"\brand\s*\(\s*\)",
            r"\brandom\.(?:random|randint|choice|getrandbits)\s*\(",
        ),
        context=re.compile(r"password|token|key|salt|nonce", re.IGNORECASE),
        severity=Severity.MEDIUM,
        title="Insecure Random Number Generation",
        description="Cryptographically weak random number generator used for security-sensitive operations.",
        suggestion="Use cryptographically secure random number generators for security-sensitive operations.",
        impact="Predictable random values could be exploited by attackers.",
        effort=Effort.LOW,
    ),
    Rule(
        key="path-traversal",
        patterns=compile_all(
            r"readFile\s*\(\s*.*\+",
            r"writeFile\s*\(\s*.*\+",
            r"path\.join\s*\(\s*.*req\.",
            r"\.\./",
        ),
        severity=Severity.HIGH,
        title="Potential Path Traversal",
        description="File path construction using user input without proper validation.",
        suggestion="Validate and sanitize file paths, use allowlists for permitted directories.",
        impact="Attackers could access files outside the intended directory structure.",
        effort=Effort.MEDIUM,
    ),
    Rule(
        key="command-injection",
        patterns=compile_all(
            r"\bexec\s*\(\s*.*\+",
            r"\bspawn\s*\(\s*.*\+",
            r"\bsystem\s*\(\s*.*\+",
            r"shell_exec\s*\(",
            r"subprocess\.\w+\(.*shell\s*=\s*True",
        ),
        severity=Severity.CRITICAL,
        title="Potential Command Injection",
        description="System command execution with user-controlled input detected.",
        suggestion=(
            "Avoid executing system commands with user input. "
            "If necessary, use parameterized commands and input validation."
        ),
        impact="Attackers could execute arbitrary system commands on the server.",
        effort=Effort.HIGH,
    ),
)


class SecurityDetector(BaseDetector):
    name = "security"
    issue_type = IssueType.SECURITY
    rules = SECURITY_RULES

    def detect(self, unit: SourceUnit) -> list[Issue]:
        return self.scan_rules(unit, IssueFactory(unit, self.issue_type))
