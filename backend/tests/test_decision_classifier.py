"""
Tests for DecisionClassifier
"""
import dataclasses
import re

import pytest

from decisionlog.core.decision_classifier import (DEFAULT_RULE_TABLE,
                                                  CategoryRules,
                                                  DecisionCategory,
                                                  DecisionClassifier,
                                                  RuleTable, analyze)


@pytest.fixture
def classifier():
    return DecisionClassifier()


@pytest.mark.parametrize("content", [None, ""])
def test_empty_content(classifier, content):
    """Empty content is never a decision"""
    verdict = classifier.analyze(content)

    assert verdict.suggest is False
    assert verdict.reason == "Empty content"
    assert verdict.category is None


def test_question_is_excluded(classifier):
    """A trailing question mark vetoes every category"""
    verdict = classifier.analyze("Have we decided to use PostgreSQL?")

    assert verdict.suggest is False
    assert verdict.reason == "Message is a question"


def test_question_mark_followed_by_whitespace(classifier):
    verdict = classifier.analyze("Are we done?  \n")

    assert verdict.suggest is False
    assert verdict.reason == "Message is a question"


def test_question_mark_mid_message_is_not_a_question(classifier):
    verdict = classifier.analyze("Why? We decided to ship on Friday")

    assert verdict.suggest is True
    assert verdict.category == DecisionCategory.EXPLICIT_DECISION.value


def test_uncertainty_is_excluded(classifier):
    """Hedging language wins over decision patterns"""
    verdict = classifier.analyze("Maybe we decided to use PostgreSQL")

    assert verdict.suggest is False
    assert verdict.reason == "Message contains uncertainty language"


def test_uncertainty_needs_word_boundary(classifier):
    """'shoulder' does not contain the word 'should'"""
    verdict = classifier.analyze("We decided to rest my shoulder")

    assert verdict.suggest is True


def test_explicit_decision(classifier):
    verdict = classifier.analyze("We decided to use PostgreSQL")

    assert verdict.suggest is True
    assert verdict.category == "Explicit Decision"
    assert verdict.reason == "Matches Explicit Decision pattern"
    assert verdict.pattern == r"\bwe decided\b"


def test_approval_whole_message(classifier):
    verdict = classifier.analyze("Approved.")

    assert verdict.suggest is True
    assert verdict.category == "Approval/Confirmation"
    assert verdict.pattern == r"^approved\.?\Z"


def test_whole_message_anchor_rejects_trailing_newline(classifier):
    """Whole-message patterns end at the true end of the content"""
    verdict = classifier.analyze("Approved.\n")

    assert verdict.suggest is False
    assert verdict.reason == "No decision patterns matched"


def test_ownership(classifier):
    verdict = classifier.analyze("I'll handle this")

    assert verdict.suggest is True
    assert verdict.category == "Ownership Acceptance"


def test_assignment_by_mention(classifier):
    verdict = classifier.analyze("@alice please handle the deploy")

    assert verdict.suggest is True
    assert verdict.category == "Task Assignment"


def test_email_address_is_not_a_mention(classifier):
    verdict = classifier.analyze("bob@alice handle")

    assert verdict.suggest is False
    assert verdict.reason == "No decision patterns matched"


def test_commitment(classifier):
    verdict = classifier.analyze("We will migrate on Friday")

    assert verdict.suggest is True
    assert verdict.category == "Commitment to Action"
    assert verdict.pattern == r"\bwe will\s+\w+"


def test_declarative(classifier):
    verdict = classifier.analyze("Action item: update the runbook")

    assert verdict.suggest is True
    assert verdict.category == "Declarative Statement"


def test_no_match(classifier):
    verdict = classifier.analyze("Lunch was great today")

    assert verdict.suggest is False
    assert verdict.reason == "No decision patterns matched"
    assert verdict.pattern is None


def test_category_order_decides(classifier):
    """Explicit Decision is tried before Approval/Confirmation"""
    verdict = classifier.analyze("We decided, go ahead")

    assert verdict.category == "Explicit Decision"


def test_case_insensitive(classifier):
    verdict = classifier.analyze("WE DECIDED TO USE POSTGRESQL")

    assert verdict.suggest is True


def test_custom_rule_table():
    """A classifier can be built from another rule table"""
    table = RuleTable(
        exclusions=(),
        categories=(
            CategoryRules(DecisionCategory.DECLARATIVE, (re.compile(r"\bship it\b", re.IGNORECASE),)),
        ),
    )
    classifier = DecisionClassifier(table)

    assert classifier.analyze("Ship it").category == "Declarative Statement"
    assert classifier.analyze("We decided to wait").suggest is False


def test_rule_table_is_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_RULE_TABLE.categories = ()


def test_module_level_analyze():
    assert analyze("Decision: we ship on Monday").suggest is True
    assert analyze("Should we ship on Monday").suggest is False
