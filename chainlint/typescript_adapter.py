"""
TypeScript language adapter for tree-sitter.
"""
import logging
from typing import Any, List, Optional, Tuple

import tree_sitter

from .file_filter import iter_source_files
from .types import LanguageAdapter

logger = logging.getLogger(__name__)


class TypeScriptAdapter(LanguageAdapter):
    """Tree-sitter adapter for TypeScript language."""

    def __init__(self):
        """Initialize TypeScript adapter; parsers are built on first use."""
        self._ts_parser = None  # Parser for .ts files
        self._tsx_parser = None  # Parser for .tsx files
        self._current_file_path = None  # Track current file for parser selection

    @property
    def language_id(self) -> str:
        """Return the language identifier."""
        return "typescript"

    @property
    def file_extensions(self) -> Tuple[str, ...]:
        """Return supported file extensions."""
        return (".ts", ".tsx", ".mts", ".cts")

    def _get_ts_parser(self):
        """Get or create the TypeScript parser for .ts files."""
        if self._ts_parser is None:
            try:
                from tree_sitter_typescript import language_typescript

                parser = tree_sitter.Parser()
                parser.language = tree_sitter.Language(language_typescript())
                self._ts_parser = parser
                logger.debug("TypeScript parser initialized")
            except ImportError as e:
                logger.warning("tree-sitter-typescript not available: %s", e)
            except (ValueError, TypeError) as e:
                logger.warning("Could not initialize TypeScript parser: %s", e)

        return self._ts_parser

    def _get_tsx_parser(self):
        """Get or create the TSX parser for .tsx files."""
        if self._tsx_parser is None:
            try:
                from tree_sitter_typescript import language_tsx

                parser = tree_sitter.Parser()
                parser.language = tree_sitter.Language(language_tsx())
                self._tsx_parser = parser
                logger.debug("TSX parser initialized")
            except ImportError as e:
                logger.warning("tree-sitter-typescript (TSX) not available: %s", e)
            except (ValueError, TypeError) as e:
                logger.warning("Could not initialize TSX parser: %s", e)

        return self._tsx_parser

    def _get_parser(self, file_path: Optional[str] = None):
        """Get the appropriate parser based on file extension."""
        path = file_path or self._current_file_path
        if path and path.lower().endswith('.tsx'):
            return self._get_tsx_parser()
        return self._get_ts_parser()

    def set_current_file(self, file_path: str):
        """Set the current file path for parser selection."""
        self._current_file_path = file_path

    def parse(self, text: str, file_path: Optional[str] = None) -> Any:
        """Parse text and return a Tree-sitter tree."""
        parser = self._get_parser(file_path)
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
        """List all TypeScript files in the given paths."""
        return list(iter_source_files(paths, self.file_extensions))


# Create default instance
default_typescript_adapter = TypeScriptAdapter()
