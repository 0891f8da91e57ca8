"""
JavaScript language adapter for tree-sitter.
"""
import logging
from typing import Any, List, Optional, Tuple

import tree_sitter

from .file_filter import iter_source_files
from .types import LanguageAdapter

logger = logging.getLogger(__name__)


class JavaScriptAdapter(LanguageAdapter):
    """Tree-sitter adapter for JavaScript language (JSX included)."""

    def __init__(self):
        """Initialize JavaScript adapter; the parser is built on first use."""
        self._parser = None

    @property
    def language_id(self) -> str:
        """Return the language identifier."""
        return "javascript"

    @property
    def file_extensions(self) -> Tuple[str, ...]:
        """Return supported file extensions."""
        return (".js", ".jsx", ".mjs", ".cjs")

    def _get_parser(self):
        """Get or create the tree-sitter parser."""
        if self._parser is None:
            try:
                from tree_sitter_javascript import language

                parser = tree_sitter.Parser()
                parser.language = tree_sitter.Language(language())
                self._parser = parser
                logger.debug("JavaScript parser initialized")
            except ImportError as e:
                logger.warning("tree-sitter-javascript not available: %s", e)
            except (ValueError, TypeError) as e:
                logger.warning("Could not initialize JavaScript parser: %s", e)

        return self._parser

    def parse(self, text: str, file_path: Optional[str] = None) -> Any:
        """Parse text and return a Tree-sitter tree."""
        parser = self._get_parser()
        if parser is None:
            return None

        if isinstance(text, bytes):
            text_bytes = text
        elif isinstance(text, str):
            text_bytes = text.encode('utf-8')
        else:
            return None

        return parser.parse(text_bytes)

    def list_files(self, paths: List[str]) -> List[str]:
        """List all JavaScript files in the given paths."""
        return list(iter_source_files(paths, self.file_extensions))


# Create default instance
default_javascript_adapter = JavaScriptAdapter()
