"""
File filtering for the chainlint engine.

Decides which files on disk are worth parsing:
- Vendor/generated directory exclusions (node_modules, dist, etc.)
- Declaration files that carry no runtime expressions (.d.ts)

Usage:
    from chainlint.file_filter import should_analyze_file

    if not should_analyze_file(file_path):
        continue
"""

import os
import re
from functools import lru_cache
from typing import FrozenSet, Iterable, Iterator, List, Optional, Tuple


# These directories contain third-party code, build artifacts, or generated files.
EXCLUDED_DIRS: FrozenSet[str] = frozenset([
    # Package managers / dependencies
    "node_modules",
    "bower_components",
    "jspm_packages",
    "vendor",

    # Build output
    "dist",
    "build",
    "out",
    ".next",
    ".nuxt",
    ".svelte-kit",

    # Version control
    ".git",
    ".svn",
    ".hg",

    # Cache / coverage
    ".cache",
    ".parcel-cache",
    ".turbo",
    "coverage",
    ".nyc_output",
    "__generated__",
])

_EXCLUDED_DIR_PATTERN = re.compile(
    r'[/\\](?:' + '|'.join(re.escape(d) for d in EXCLUDED_DIRS) + r')(?:[/\\]|$)',
    re.IGNORECASE
)

# Extensions (checked as suffixes) that never contain analysable expressions.
EXCLUDED_EXTENSIONS_BY_LANG = {
    "typescript": frozenset([".d.ts", ".d.mts", ".d.cts"]),
    "javascript": frozenset([".min.js"]),
}


@lru_cache(maxsize=4096)
def is_excluded_path(file_path: str) -> bool:
    """Check if a file path is inside an excluded directory."""
    normalized = file_path.replace('\\', '/')
    return bool(_EXCLUDED_DIR_PATTERN.search(normalized))


def detect_language(file_path: str) -> Optional[str]:
    """Detect language from file extension."""
    lower = file_path.lower()
    if lower.endswith(('.ts', '.tsx', '.mts', '.cts')):
        return 'typescript'
    if lower.endswith(('.js', '.jsx', '.mjs', '.cjs')):
        return 'javascript'
    return None


def has_excluded_extension(file_path: str, language: Optional[str] = None) -> bool:
    """Check if a file has an extension that should be skipped for its language."""
    if language is None:
        language = detect_language(file_path)
    excluded = EXCLUDED_EXTENSIONS_BY_LANG.get(language)
    if not excluded:
        return False
    lower_path = file_path.lower()
    return any(lower_path.endswith(ext) for ext in excluded)


def should_analyze_file(file_path: str, language: Optional[str] = None) -> bool:
    """Central decision point: should this file be parsed at all?"""
    if is_excluded_path(file_path):
        return False
    if has_excluded_extension(file_path, language):
        return False
    return True


def iter_source_files(paths: Iterable[str], extensions: Tuple[str, ...]) -> Iterator[str]:
    """Yield files under ``paths`` ending with one of ``extensions``.

    Explicitly named files are yielded even when their directory would be
    excluded; directory walks skip hidden and excluded directories.
    """
    for path in paths:
        if os.path.isfile(path):
            if path.endswith(extensions):
                yield path
        elif os.path.isdir(path):
            for root, dirs, files in os.walk(path):
                dirs[:] = sorted(
                    d for d in dirs
                    if not d.startswith('.') and d.lower() not in EXCLUDED_DIRS
                )
                for name in sorted(files):
                    if name.endswith(extensions):
                        yield os.path.join(root, name)


def filter_files(files: List[str], language: Optional[str] = None) -> List[str]:
    """Filter a list of files to only those that should be analyzed."""
    return [f for f in files if should_analyze_file(f, language)]


def clear_caches():
    """Clear all LRU caches. Useful for testing."""
    is_excluded_path.cache_clear()
