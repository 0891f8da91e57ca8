"""
Chain walker: groups the operands of one ``&&``/``||`` run into chains.

A chain starts at a seed operand and absorbs every following operand whose
subject repeats the accumulated path or extends it by one or more accesses.
The first failing operand closes the chain; scanning resumes there, so one
run can yield several independent chains.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from .access_paths import AccessPath, Link, access_path, match_extension
from .guards import Guard, classify_guard


class Polarity(Enum):
    POSITIVE = "positive"
    NEGATED = "negated"


@dataclass
class Chain:
    """A mergeable group of operands.

    ``seed`` is the path of the first operand. ``extensions`` holds the
    links added by later operands, each paired with whether it was guarded
    by its own operand (rendered ``?.``) or arrived as part of a jump.
    """
    seed: AccessPath
    polarity: Polarity
    first_operand: Any
    last_guard: Guard
    extensions: List[tuple] = field(default_factory=list)
    has_jump: bool = False

    @property
    def start_byte(self) -> int:
        return self.first_operand.start_byte

    @property
    def end_byte(self) -> int:
        return self.last_guard.operand.end_byte

    @property
    def guarded_count(self) -> int:
        return sum(1 for _, guarded in self.extensions if guarded)

    def links(self) -> List[Link]:
        return list(self.seed.links) + [link for link, _ in self.extensions]


def is_valid_seed(path: Optional[AccessPath]) -> bool:
    """A chain may start at ``path`` unless it is a bare ``this`` or a call."""
    if path is None:
        return False
    return not path.is_bare_this and not path.ends_in_call


def walk_chains(operands, operator: str, source) -> List[Chain]:
    """Return every reportable chain in the flattened ``operands``."""
    polarity = Polarity.NEGATED if operator == "||" else Polarity.POSITIVE
    chains = []
    current = None
    current_path = None

    for operand in operands:
        guard = classify_guard(operand, operator, source)
        path = access_path(guard.subject, source) if guard is not None else None

        if current is not None and path is not None:
            added = match_extension(current_path, path)
            if added is not None:
                new_links = path.links[len(current_path.links):]
                for index, link in enumerate(new_links):
                    current.extensions.append((link, index == 0))
                if added > 1:
                    current.has_jump = True
                if added:
                    current_path = path
                current.last_guard = guard
                continue

        if current is not None and current.guarded_count:
            chains.append(current)
        current = None
        current_path = None

        if guard is not None and is_valid_seed(path):
            current = Chain(path, polarity, operand, guard)
            current_path = path

    if current is not None and current.guarded_count:
        chains.append(current)
    return chains
