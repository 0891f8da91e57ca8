"""
chainlint rules package

Rules are discovered by ``chainlint.registry.discover_rules`` which imports
every module in this package and registers the entries of its ``RULES`` list.

To add a new rule:
1. Create a Python file in this directory (e.g., my_rule.py)
2. Define a class with ``meta``, ``requires`` and ``visit(ctx)``
3. End the module with ``RULES = [MyRule()]``
"""

from typing import List

from chainlint.types import Rule

# Discovered modules carry their own RULES; the package itself registers none
RULES: List[Rule] = []

__all__ = ["RULES"]
