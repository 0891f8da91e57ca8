"""
chainlint tree-sitter engine package.

This package provides a small lint engine for TypeScript and JavaScript built
on tree-sitter, plus the optional-chain matchers used by its rule.
"""

from .types import (
    Finding, RuleMeta, Rule, RuleContext, Edit, Requires, Source,
    LanguageAdapter, Severity, NodeRange
)

from .registry import (
    Registry, get_adapter, get_all_rules, get_enabled_rules, discover_rules,
    load_default_adapters, list_supported_languages, get_registry
)

from .config import (
    EngineConfig, load_config, get_default_config, save_config, find_config_file, get_rule_severity
)

__all__ = [
    # Types
    "Finding", "RuleMeta", "Rule", "RuleContext", "Edit", "Requires", "Source",
    "LanguageAdapter", "Severity", "NodeRange",

    # Registry
    "Registry", "get_adapter", "get_all_rules", "get_enabled_rules", "discover_rules",
    "load_default_adapters", "list_supported_languages", "get_registry",

    # Config
    "EngineConfig", "load_config", "get_default_config", "save_config", "find_config_file", "get_rule_severity"
]
