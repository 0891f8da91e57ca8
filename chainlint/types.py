"""
Core types for the chainlint tree-sitter engine.

This module provides shared dataclasses and types used across the engine,
adapters, and rules.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, Iterator, List, Literal, Optional, Protocol, Tuple
from abc import ABC, abstractmethod


# Type aliases for clarity
Severity = Literal["info", "warn", "warning", "error"]
Priority = Literal["P0", "P1", "P2"]
Tier = Literal[0, 1, 2]
NodeRange = Tuple[int, int]  # (start_byte, end_byte) 0-based


@dataclass(frozen=True)
class Edit:
    """A suggested edit to fix an issue."""
    start_byte: int
    end_byte: int
    replacement: str

    def apply(self, text: str) -> str:
        """Return ``text`` with this edit applied (byte offsets, UTF-8)."""
        data = text.encode('utf-8')
        patched = data[:self.start_byte] + self.replacement.encode('utf-8') + data[self.end_byte:]
        return patched.decode('utf-8')


@dataclass(frozen=True)
class Finding:
    """A finding represents an issue detected by a rule.

    ``autofix`` holds edits that are safe to apply unattended. ``suggestions``
    holds edits that are only offered to the user.
    """
    rule: str
    message: str
    file: str
    start_byte: int
    end_byte: int
    severity: Severity
    autofix: Optional[List[Edit]] = None
    suggestions: Optional[List[Edit]] = None
    meta: Optional[Dict[str, Any]] = None

    def _replace(self, **kwargs):
        """Provide NamedTuple-like _replace method for compatibility."""
        return replace(self, **kwargs)


@dataclass(frozen=True)
class RuleMeta:
    """Metadata about a rule.

    Attributes:
        id: Unique rule identifier (e.g., "lang.ts_prefer_optional_chain")
        category: Rule category for grouping
        tier: Analysis tier (0=syntax only)
        priority: P0/P1/P2 priority level
        autofix_safety: Whether autofix is safe/caution/suggest-only
        description: Human-readable description
        langs: List of supported languages
    """
    id: str
    category: str
    tier: Tier
    priority: Priority
    autofix_safety: Literal["safe", "caution", "suggest-only"]
    description: str = ""
    langs: List[str] = None  # ["typescript", "javascript"], etc.

    def __post_init__(self):
        if self.langs is None:
            object.__setattr__(self, 'langs', [])


@dataclass(frozen=True)
class Requires:
    """Represents requirements that a rule needs to run."""
    raw_text: bool = False
    syntax: bool = True


class Source:
    """Read-only view of the analysed text, addressed by UTF-8 byte offsets.

    Tree-sitter reports byte offsets, so every slice goes through the
    encoded buffer.
    """

    __slots__ = ("data",)

    def __init__(self, text):
        if isinstance(text, bytes):
            self.data = text
        else:
            self.data = str(text).encode('utf-8')

    def slice(self, start_byte: int, end_byte: int) -> str:
        return self.data[start_byte:end_byte].decode('utf-8', errors='replace')

    def text(self, node) -> str:
        """Exact source text of a node, comments and whitespace included."""
        if node is None:
            return ""
        return self.slice(node.start_byte, node.end_byte)

    def span(self, node) -> NodeRange:
        return (node.start_byte, node.end_byte)

    def __len__(self) -> int:
        return len(self.data)


@dataclass
class RuleContext:
    """Context passed to rules during execution."""
    file_path: str
    text: str
    tree: Any
    adapter: 'LanguageAdapter'  # Forward reference
    config: Dict[str, Any]

    def __post_init__(self):
        self._source = None

    @property
    def source(self) -> Source:
        """Encoded view of ``text`` shared by all rules for this file."""
        if self._source is None:
            self._source = Source(self.text)
        return self._source

    def get_text(self, start_byte: int, end_byte: int) -> str:
        """Get text slice from byte positions."""
        return self.source.slice(start_byte, end_byte)

    def node_text(self, node) -> str:
        """Get the exact source text of a node."""
        return self.source.text(node)

    def node_span(self, node) -> NodeRange:
        """Get byte span of a node (start_byte, end_byte)."""
        return self.source.span(node)

    def walk_nodes(self, start_node=None) -> Iterator[Any]:
        """Walk all nodes in the syntax tree in depth-first pre-order.

        Uses an explicit stack so deeply nested expressions do not hit the
        recursion limit.
        """
        if not self.tree and start_node is None:
            return

        root = start_node or getattr(self.tree, 'root_node', self.tree)
        stack = [root]
        while stack:
            node = stack.pop()
            yield node
            children = getattr(node, 'children', None) or []
            # Reverse so the leftmost child is visited first
            stack.extend(reversed(children))


class Rule(Protocol):
    """Protocol for all rules in the engine.

    Rules analyze code and return findings. They should be stateless and thread-safe.
    """
    meta: RuleMeta
    requires: Requires

    def visit(self, ctx: RuleContext) -> Iterable[Finding]:
        """Visit a file and return findings.

        Args:
            ctx: Rule context containing file path, text, tree, adapter, and config

        Returns:
            Iterable of findings for this file
        """
        ...


class LanguageAdapter(ABC):
    """Abstract base class for language adapters."""

    @property
    @abstractmethod
    def language_id(self) -> str:
        """Return the language identifier (e.g., 'typescript', 'javascript')."""
        pass

    @property
    @abstractmethod
    def file_extensions(self) -> Tuple[str, ...]:
        """Return supported file extensions (e.g., ('.ts', '.tsx'))."""
        pass

    @abstractmethod
    def parse(self, text: str, file_path: Optional[str] = None) -> Any:
        """Parse text and return a Tree-sitter tree, or None if no parser is available."""
        pass

    @abstractmethod
    def list_files(self, paths: List[str]) -> List[str]:
        """List all files matching this adapter's extensions in the given paths."""
        pass

    def node_text(self, text: str, start_byte: int, end_byte: int) -> str:
        """Extract text between byte offsets."""
        return Source(text).slice(start_byte, end_byte)

    def byte_to_linecol(self, text: str, byte: int) -> Tuple[int, int]:
        """Convert byte offset to (line, column) 1-based."""
        data = text.encode('utf-8')
        byte = max(0, min(byte, len(data)))
        prefix = data[:byte].decode('utf-8', errors='ignore')
        lines = prefix.split('\n')
        return (len(lines), len(lines[-1]) + 1)
