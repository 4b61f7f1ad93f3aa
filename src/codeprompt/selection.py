"""
Combined include / exclude / ignore selection policy.

For a file the checks run in order and the first failure excludes it:

1. with include patterns configured, the path must match one of them;
2. a path matching any exclude pattern is excluded;
3. a path the ignore rules report as ignored is excluded, unless
   ``include_overrides_ignore`` is set and an include pattern matched it.

Hidden entries are skipped by the walker under standard filters; with
``include_overrides_ignore`` an include pattern that names a hidden file
(``-i .env``) or covers a hidden directory brings it back.
"""

from __future__ import annotations

from typing import Optional

from .ignore import IgnoreRuleSet
from .models import MatchDecision, SelectionConfig
from .patterns import PatternSet, compile_patterns


class Selector:
    def __init__(
        self,
        include: PatternSet,
        exclude: PatternSet,
        include_overrides_ignore: bool = False,
    ) -> None:
        self.include = include
        self.exclude = exclude
        self.include_overrides_ignore = include_overrides_ignore

    @classmethod
    def from_config(cls, config: SelectionConfig) -> "Selector":
        """Compile the configured patterns; raises ``ConfigurationError``."""
        return cls(
            compile_patterns(config.include),
            compile_patterns(config.exclude),
            include_overrides_ignore=config.include_overrides_ignore,
        )

    def decide(self, rel_path: str, rules: IgnoreRuleSet) -> MatchDecision:
        included_by: Optional[str] = None
        if self.include:
            included_by = self.include.match(rel_path)
            if included_by is None:
                return MatchDecision(rel_path, False, "include")

        excluded_by = self.exclude.match(rel_path)
        if excluded_by is not None:
            return MatchDecision(rel_path, False, "exclude", excluded_by)

        if not (self.include_overrides_ignore and included_by is not None):
            rule = rules.decide(rel_path)
            if rule is not None and not rule.negate:
                return MatchDecision(rel_path, False, "ignore", str(rule))

        if included_by is not None:
            return MatchDecision(rel_path, True, "include", included_by)
        return MatchDecision(rel_path, True)

    def reveals_hidden(self, rel_path: str, is_dir: bool) -> bool:
        """True when an include pattern overrides the hidden-entry filter for *rel_path*."""
        if not (self.include_overrides_ignore and self.include):
            return False
        if is_dir:
            return self.include.match_dir(rel_path) is not None
        return self.include.match(rel_path) is not None

    def prune(self, rel_dir: str, rules: IgnoreRuleSet) -> Optional[MatchDecision]:
        """Return an exclusion when directory *rel_dir* must not be entered."""
        excluded_by = self.exclude.match_dir(rel_dir)
        if excluded_by is not None:
            return MatchDecision(rel_dir + "/", False, "exclude", excluded_by)

        rule = rules.decide(rel_dir, is_dir=True)
        if rule is None or rule.negate:
            return None
        if self.include_overrides_ignore and self.include.match_dir(rel_dir) is not None:
            return None
        return MatchDecision(rel_dir + "/", False, "ignore", str(rule))
