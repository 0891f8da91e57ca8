"""
Suppression system for chainlint rules.

A comment such as ``// chainlint: ignore[lang.ts_prefer_optional_chain]``
(or the ``/* ... */`` and ``#`` forms) suppresses findings that start on the
same line. Patterns may be exact rule ids or globs like ``lang.*``.
"""

import fnmatch
import re
from typing import Dict, List, Set, Tuple

_IGNORE_PATTERN = re.compile(
    r'(?://|/\*|#)\s*chainlint:\s*ignore\s*\[\s*([^\]]+)\s*\]',
    re.IGNORECASE
)
_MALFORMED_PATTERN = re.compile(
    r'(?://|/\*|#)\s*chainlint:\s*ignore\s*\[[^\]\n]*\]?',
    re.IGNORECASE
)


class SuppressionParser:
    """Parser for chainlint suppression comments."""

    def __init__(self, text: str):
        self.text = text
        self.lines = text.split('\n')
        self._data = text.encode('utf-8')
        self._parse_suppressions()

    def _parse_suppressions(self):
        """Parse all suppression comments in the text."""
        self.line_suppressions: Dict[int, Set[str]] = {}  # line_number -> {rule_patterns}

        for line_num, line in enumerate(self.lines, 1):
            patterns = self._extract_suppression_patterns(line)
            if patterns:
                self.line_suppressions[line_num] = patterns

    def _extract_suppression_patterns(self, line: str) -> Set[str]:
        """Extract suppression patterns from a line."""
        patterns = set()

        for match in _IGNORE_PATTERN.finditer(line):
            # Split on commas and clean up whitespace
            for pattern in match.group(1).split(','):
                pattern = pattern.strip()
                if pattern:
                    patterns.add(pattern)

        return patterns

    def is_suppressed(self, rule_id: str, start_byte: int) -> bool:
        """Check if a rule finding should be suppressed."""
        line_num = self._byte_to_line(start_byte)

        for pattern in self.line_suppressions.get(line_num, ()):
            if self._matches_pattern(rule_id, pattern):
                return True

        return False

    def _byte_to_line(self, byte_offset: int) -> int:
        """Convert byte offset to 1-based line number."""
        if byte_offset < 0:
            return 1
        if byte_offset >= len(self._data):
            return len(self.lines)

        return self._data[:byte_offset].count(b'\n') + 1

    def _matches_pattern(self, rule_id: str, pattern: str) -> bool:
        """Check if a rule ID matches a suppression pattern."""
        return rule_id == pattern or fnmatch.fnmatch(rule_id, pattern)

    def get_suppression_stats(self) -> Dict[str, int]:
        """Get statistics about suppressions in the file."""
        all_patterns = set()
        for patterns in self.line_suppressions.values():
            all_patterns.update(patterns)

        return {
            "suppressed_lines": len(self.line_suppressions),
            "unique_patterns": len(all_patterns),
            "total_suppressions": sum(len(patterns) for patterns in self.line_suppressions.values())
        }


def filter_suppressed_findings(findings: List, text: str) -> List:
    """Filter out suppressed findings from a list."""
    if not findings:
        return findings

    parser = SuppressionParser(text)
    if not parser.line_suppressions:
        return findings

    return [
        finding for finding in findings
        if not parser.is_suppressed(getattr(finding, 'rule', ''), getattr(finding, 'start_byte', 0))
    ]


def validate_suppression_patterns(text: str) -> List[Tuple[int, str]]:
    """
    Validate suppression patterns in text and return any errors.

    Returns:
        List of (line_number, error_message) tuples
    """
    errors = []

    for line_num, line in enumerate(text.split('\n'), 1):
        for match in _MALFORMED_PATTERN.finditer(line):
            pattern = match.group(0)
            if not pattern.endswith(']'):
                errors.append((line_num, "Unclosed suppression bracket"))
            elif re.search(r'\[\s*\]', pattern):
                errors.append((line_num, "Empty suppression pattern"))

    return errors
