"""
Registry for rules and language adapters.

This module provides a central registry to register and discover rules
and language adapters in the chainlint engine.
"""

import fnmatch
import importlib
import logging
import os
import pkgutil
from typing import Dict, List, Optional

from .types import Rule, LanguageAdapter

logger = logging.getLogger(__name__)

DEFAULT_RULE_PACKAGES = ["chainlint_rules"]


class Registry:
    """Central registry for rules and adapters."""

    def __init__(self):
        self._rules: List[Rule] = []
        self._adapters: Dict[str, LanguageAdapter] = {}
        self._rule_index: Dict[str, Rule] = {}  # id -> rule

    def register_rule(self, rule: Rule) -> None:
        """Register a rule in the registry."""
        if rule.meta.id in self._rule_index:
            # Skip duplicate registration silently to avoid import noise
            return

        self._rules.append(rule)
        self._rule_index[rule.meta.id] = rule

    def register_adapter(self, language: str, adapter: LanguageAdapter) -> None:
        """Register a language adapter. Silently skips if already registered."""
        if language in self._adapters:
            return

        self._adapters[language] = adapter

    def get_adapter(self, language: str) -> Optional[LanguageAdapter]:
        """Get adapter for a language."""
        return self._adapters.get(language)

    def get_adapter_for_file(self, file_path: str) -> Optional[LanguageAdapter]:
        """Get adapter for a file based on its extension."""
        ext = os.path.splitext(file_path)[1].lower()

        for adapter in self._adapters.values():
            if ext in adapter.file_extensions:
                return adapter
        return None

    def get_rule(self, rule_id: str) -> Optional[Rule]:
        """Get rule by id."""
        return self._rule_index.get(rule_id)

    def get_all_rules(self) -> List[Rule]:
        """Get all registered rules."""
        return self._rules.copy()

    def get_rule_ids(self) -> List[str]:
        """Get all registered rule IDs."""
        return list(self._rule_index.keys())

    def get_rules_for_language(self, language: str) -> List[Rule]:
        """Get all rules that support a specific language."""
        return [rule for rule in self._rules if language in rule.meta.langs]

    def get_enabled_rules(self, enabled_patterns: List[str], language: str) -> List[Rule]:
        """Get rules for ``language`` whose ids match any of the patterns."""
        language_rules = self.get_rules_for_language(language)

        if not enabled_patterns:
            return []

        # Special case: "*" means every rule for the language
        if enabled_patterns == ["*"]:
            return language_rules

        enabled_rules = []
        for rule in language_rules:
            for pattern in enabled_patterns:
                if fnmatch.fnmatch(rule.meta.id, pattern):
                    enabled_rules.append(rule)
                    break  # Don't add the same rule multiple times

        return enabled_rules

    def get_all_adapters(self) -> Dict[str, LanguageAdapter]:
        """Get all registered adapters."""
        return self._adapters.copy()

    def list_supported_languages(self) -> List[str]:
        """List all supported languages."""
        return list(self._adapters.keys())

    def discover_rules(self, entry_packages: List[str]) -> int:
        """
        Auto-discover and register rules from packages.

        Args:
            entry_packages: List of package names to discover from

        Returns:
            Number of rules discovered and registered
        """
        initial_count = len(self._rules)

        for package_name in entry_packages:
            try:
                self._discover_from_package(package_name)
            except Exception as e:
                logger.warning("Failed to discover rules from %s: %s", package_name, e)

        return len(self._rules) - initial_count

    def _discover_from_package(self, package_name: str) -> None:
        """Discover rules from a specific package."""
        try:
            package = importlib.import_module(package_name)
        except ImportError as e:
            logger.warning("Could not import package %s: %s", package_name, e)
            return

        self._extract_rules_from_module(package, package_name)

        # Walk through all submodules
        if hasattr(package, '__path__'):
            for _importer, modname, _ispkg in pkgutil.walk_packages(
                package.__path__,
                package.__name__ + "."
            ):
                try:
                    module = importlib.import_module(modname)
                    self._extract_rules_from_module(module, modname)
                except Exception as e:
                    logger.warning("Failed to import %s: %s", modname, e)
                    continue

    def _extract_rules_from_module(self, module, module_name: str) -> None:
        """Register every entry of a module-level ``RULES`` list."""
        rules = getattr(module, 'RULES', None)
        if not isinstance(rules, list):
            return

        for rule in rules:
            try:
                # If it's a class, instantiate it
                if isinstance(rule, type):
                    self.register_rule(rule())
                else:
                    self.register_rule(rule)
            except Exception as e:
                logger.warning("Failed to register rule from %s: %s", module_name, e)

    def clear(self) -> None:
        """Clear all registered rules and adapters (mainly for testing)."""
        self._rules.clear()
        self._adapters.clear()
        self._rule_index.clear()


# Global registry instance
_global_registry = Registry()


def load_default_adapters() -> None:
    """Register the TypeScript and JavaScript adapters."""
    try:
        from .typescript_adapter import default_typescript_adapter
        from .javascript_adapter import default_javascript_adapter
        _global_registry.register_adapter("typescript", default_typescript_adapter)
        _global_registry.register_adapter("javascript", default_javascript_adapter)
    except ImportError as e:
        logger.warning("Could not load TypeScript/JavaScript adapters: %s", e)


# Convenience functions that operate on the global registry
def get_adapter(language: str) -> Optional[LanguageAdapter]:
    """Get adapter for a language from the global registry."""
    return _global_registry.get_adapter(language)


def get_all_rules() -> List[Rule]:
    """Get all registered rules from the global registry."""
    return _global_registry.get_all_rules()


def get_enabled_rules(enabled_patterns: List[str], language: str) -> List[Rule]:
    """Get rules enabled by patterns for a specific language."""
    return _global_registry.get_enabled_rules(enabled_patterns, language)


def list_supported_languages() -> List[str]:
    """List all supported languages from the global registry."""
    return _global_registry.list_supported_languages()


def discover_rules(entry_packages: Optional[List[str]] = None) -> int:
    """Auto-discover and register rules from packages."""
    if entry_packages is None:
        entry_packages = DEFAULT_RULE_PACKAGES
    return _global_registry.discover_rules(entry_packages)


def get_registry() -> Registry:
    """Get the global registry instance (for advanced usage)."""
    return _global_registry
