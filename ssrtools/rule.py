"""Regular-expression rules matched against host names."""

from __future__ import annotations

import re
from typing import Iterator, List, Optional, Pattern

__all__ = ["Rule", "RuleError", "RuleList"]


class RuleError(ValueError):
    """Raised for a bad rule argument or pattern."""


class Rule:
    """A rule holding one pattern, compiled on :meth:`init`."""

    def __init__(self, pattern: Optional[str] = None) -> None:
        self.pattern = pattern
        self._compiled: Optional[Pattern[str]] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.pattern!r})"

    def accept_arg(self, arg: str) -> None:
        """Take ``arg`` as the pattern; a rule accepts only one argument."""
        if self.pattern is not None:
            raise RuleError(f"Unexpected table rule argument: {arg}")
        self.pattern = arg

    def init(self) -> None:
        """Compile the pattern, once; raise RuleError if it is invalid."""
        if self._compiled is not None:
            return
        if self.pattern is None:
            raise RuleError("rule has no pattern")
        try:
            self._compiled = re.compile(self.pattern)
        except re.error as exc:
            raise RuleError(
                f"regex compilation failed at offset {exc.pos}: {exc.msg}"
            ) from exc

    def matches(self, name: Optional[str]) -> bool:
        """Whether the pattern matches anywhere in ``name`` (None is empty)."""
        self.init()
        assert self._compiled is not None
        return self._compiled.search(name if name is not None else "") is not None

    def _release(self) -> None:
        self._compiled = None


class RuleList:
    """Rules kept in insertion order and searched first to last."""

    def __init__(self) -> None:
        self._rules: List[Rule] = []

    def add(self, rule: Rule) -> None:
        """Append ``rule``."""
        self._rules.append(rule)

    def remove(self, rule: Rule) -> None:
        """Remove ``rule`` and drop its compiled pattern."""
        for position, item in enumerate(self._rules):
            if item is rule:
                del self._rules[position]
                rule._release()
                return
        raise ValueError("rule is not in the list")

    def lookup(self, name: Optional[str]) -> Optional[Rule]:
        """The first rule whose pattern matches ``name``, or None."""
        return next((rule for rule in self._rules if rule.matches(name)), None)

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)