"""
Rule-based detection of decision-like chat messages

The classifier only produces an advisory verdict; it never creates or
changes a decision. Rules are evaluated as one ordered table: exclusions
first, then the decision categories in fixed order, patterns within a
category in listed order. The first rule that matches decides the verdict,
so the order of the table is part of its meaning.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Pattern, Tuple

from pydantic import BaseModel, ConfigDict


class DecisionCategory(str, Enum):
    """Decision categories in evaluation order"""
    EXPLICIT_DECISION = "Explicit Decision"
    APPROVAL = "Approval/Confirmation"
    OWNERSHIP = "Ownership Acceptance"
    ASSIGNMENT = "Task Assignment"
    COMMITMENT = "Commitment to Action"
    DECLARATIVE = "Declarative Statement"


class Verdict(BaseModel):
    """Classifier output"""
    model_config = ConfigDict(frozen=True)

    suggest: bool
    reason: str
    category: Optional[str] = None
    pattern: Optional[str] = None


def _compile(sources: Iterable[str]) -> Tuple[Pattern, ...]:
    return tuple(re.compile(source, re.IGNORECASE) for source in sources)


@dataclass(frozen=True)
class CategoryRules:
    """Ordered patterns of one decision category"""
    category: DecisionCategory
    patterns: Tuple[Pattern, ...]


@dataclass(frozen=True)
class ExclusionRules:
    """Patterns that veto a suggestion before any category is tried"""
    reason: str
    patterns: Tuple[Pattern, ...]


@dataclass(frozen=True)
class RuleTable:
    """Immutable rule configuration for DecisionClassifier"""
    exclusions: Tuple[ExclusionRules, ...]
    categories: Tuple[CategoryRules, ...]


@dataclass(frozen=True)
class _Rule:
    pattern: Pattern
    reason: str
    category: Optional[DecisionCategory] = None

    @property
    def suggests(self) -> bool:
        return self.category is not None


QUESTION_REASON = "Message is a question"
UNCERTAINTY_REASON = "Message contains uncertainty language"
EMPTY_REASON = "Empty content"
NO_MATCH_REASON = "No decision patterns matched"

QUESTION_PATTERNS = _compile([
    r"\?\s*\Z",
])

UNCERTAINTY_PATTERNS = _compile([
    r"\bmaybe\b",
    r"\bmight\b",
    r"\bcould\b",
    r"\bshould\b",
    r"\bi think\b",
    r"\bi suggest\b",
    r"\bperhaps\b",
    r"\bpossibly\b",
    r"\bwhat if\b",
    r"\bwhat about\b",
    r"\bany thoughts\b",
    r"\bwhat do you think\b",
    r"\bdo you think\b",
    r"\blet me know\b",
    r"\bopen to suggestions\b",
    r"\bnot sure\b",
    r"\bconsidering\b",
    r"\blooking into\b",
])

EXPLICIT_DECISION_PATTERNS = _compile([
    r"\bdecision:\s*",
    r"\bfinal decision\s*(is)?\b",
    r"\bthis is finalized\b",
    r"\bwe'?re going with\b",
    r"\blet'?s go with\b",
    r"\bwe decided\b",
    r"\bdecided to\b",
    r"\bit'?s decided\b",
    r"\bour decision is\b",
    r"\bfinal answer\b",
])

APPROVAL_PATTERNS = _compile([
    r"^approved\.?\Z",
    r"^confirmed\.?\Z",
    r"\blooks good,?\s*proceed\b",
    r"\byes,?\s*go ahead\b",
    r"\bgo ahead\b",
    r"\bapproved and closed\b",
    r"\bapproved:\s*",
    r"\bconfirmed:\s*",
])

OWNERSHIP_PATTERNS = _compile([
    r"\bi'?ll handle this\b",
    r"\bi'?ll take care of (it|this)\b",
    r"\bi'?ll own this\b",
    r"\bassigned to me\b",
    r"\bi'?ll take this\b",
    r"\bi'?m on (it|this)\b",
    r"\bi got (it|this)\b",
])

ASSIGNMENT_PATTERNS = _compile([
    r"\bassign(ed)?\s+(this\s+)?to\s+\w+",
    r"\b\w+\s+will handle (this|it)\b",
    r"\bthis goes to\s+\w+",
    r"\bgoes to the\s+\w+\s+team\b",
    # \B: "@" must open a mention, not follow a word as in an e-mail address
    r"\B@\w+\s+(please\s+)?(handle|take|own)\b",
])

COMMITMENT_PATTERNS = _compile([
    r"\bwe will\s+\w+",
    r"\bwe'?ll\s+\w+",
    r"\bwe'?re switching to\b",
    r"\bwe'?re moving to\b",
    r"\bwe'?ll ship (this|it)\b",
    r"\bwe'?ll postpone\b",
    r"\bwe'?ll proceed with\b",
    r"\bproceeding with\b",
    r"\bmoving forward with\b",
    r"\bwe chose\b",
    r"\bwe'?ve chosen\b",
    r"\bwe picked\b",
    r"\bwe selected\b",
    r"\bthe plan is\b",
])

DECLARATIVE_PATTERNS = _compile([
    r"^decision made\.?\Z",
    r"^finalized\.?\Z",
    r"\bfinalized:\s*",
    r"\baction item:\s*",
    r"\btodo:\s*",
])

DEFAULT_RULE_TABLE = RuleTable(
    exclusions=(
        ExclusionRules(reason=QUESTION_REASON, patterns=QUESTION_PATTERNS),
        ExclusionRules(reason=UNCERTAINTY_REASON, patterns=UNCERTAINTY_PATTERNS),
    ),
    categories=(
        CategoryRules(DecisionCategory.EXPLICIT_DECISION, EXPLICIT_DECISION_PATTERNS),
        CategoryRules(DecisionCategory.APPROVAL, APPROVAL_PATTERNS),
        CategoryRules(DecisionCategory.OWNERSHIP, OWNERSHIP_PATTERNS),
        CategoryRules(DecisionCategory.ASSIGNMENT, ASSIGNMENT_PATTERNS),
        CategoryRules(DecisionCategory.COMMITMENT, COMMITMENT_PATTERNS),
        CategoryRules(DecisionCategory.DECLARATIVE, DECLARATIVE_PATTERNS),
    ),
)


class DecisionClassifier:
    """Flags chat messages that read like decisions"""

    def __init__(self, rule_table: Optional[RuleTable] = None):
        self.rule_table = rule_table or DEFAULT_RULE_TABLE
        self._rules = self._flatten(self.rule_table)

    @staticmethod
    def _flatten(rule_table: RuleTable) -> Tuple[_Rule, ...]:
        rules = []
        for exclusion in rule_table.exclusions:
            rules.extend(_Rule(pattern, exclusion.reason) for pattern in exclusion.patterns)
        for group in rule_table.categories:
            reason = f"Matches {group.category.value} pattern"
            rules.extend(_Rule(pattern, reason, group.category) for pattern in group.patterns)
        return tuple(rules)

    def analyze(self, content: Optional[str]) -> Verdict:
        """Return the verdict of the first matching rule"""
        if not content or not isinstance(content, str):
            return Verdict(suggest=False, reason=EMPTY_REASON)

        for rule in self._rules:
            if not rule.pattern.search(content):
                continue
            if not rule.suggests:
                return Verdict(suggest=False, reason=rule.reason)
            return Verdict(
                suggest=True,
                reason=rule.reason,
                category=rule.category.value,
                pattern=rule.pattern.pattern,
            )

        return Verdict(suggest=False, reason=NO_MATCH_REASON)


_default_classifier = DecisionClassifier()


def analyze(content: Optional[str]) -> Verdict:
    """Analyze content with the default rule table"""
    return _default_classifier.analyze(content)
