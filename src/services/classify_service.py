import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple
from src.core.logging import logger
from src.db.memory import TicketStore
from src.db.models import (
    Category, Priority, Ticket, ClassificationDecision, ClassificationLogEntry
)


@dataclass(frozen=True)
class KeywordRule:
    key: str
    patterns: Tuple[re.Pattern, ...]


def _rule(key: str, *sources: str) -> KeywordRule:
    return KeywordRule(key, tuple(re.compile(s, re.IGNORECASE) for s in sources))


# Declaration order is the tie-break: on equal hit counts the earlier rule wins.
CATEGORY_RULES: Tuple[KeywordRule, ...] = (
    _rule(Category.ACCOUNT_ACCESS.value, r"login", r"password", r"2fa", r"two[-\s]?factor", r"can't access"),
    _rule(Category.TECHNICAL_ISSUE.value, r"error", r"crash", r"fail", r"exception", r"bug"),
    _rule(Category.BILLING_QUESTION.value, r"payment", r"invoice", r"refund", r"billing", r"charge"),
    _rule(Category.FEATURE_REQUEST.value, r"feature", r"enhancement", r"suggestion", r"request"),
    _rule(Category.BUG_REPORT.value, r"bug report", r"reproduce", r"steps to reproduce", r"defect"),
)

PRIORITY_RULES: Tuple[KeywordRule, ...] = (
    _rule(Priority.URGENT.value, r"can't access", r"critical", r"production down", r"security"),
    _rule(Priority.HIGH.value, r"important", r"blocking", r"asap"),
    _rule(Priority.LOW.value, r"minor", r"cosmetic", r"suggestion"),
)


def score_rules(
    rules: Sequence[KeywordRule],
    text: str,
    keywords_found: List[str]
) -> Tuple[Optional[str], int]:
    """
    Pick the rule with the most matching patterns.

    Every matched pattern source is appended to `keywords_found` (once),
    whether or not its rule wins.

    Returns:
        (winning rule key or None, its hit count)
    """
    best_key = None
    best_hits = 0

    for rule in rules:
        matched = [p.pattern for p in rule.patterns if p.search(text)]
        for keyword in matched:
            if keyword not in keywords_found:
                keywords_found.append(keyword)
        if len(matched) > best_hits:
            best_key = rule.key
            best_hits = len(matched)

    return best_key, best_hits


class ClassifyService:
    def __init__(self, store: TicketStore):
        self.store = store

    @staticmethod
    def decide(subject: str, description: str) -> ClassificationDecision:
        """Keyword scoring over subject + description. No side effects."""
        text = f"{subject} {description}"
        keywords_found: List[str] = []

        category, category_score = score_rules(CATEGORY_RULES, text, keywords_found)
        priority, priority_score = score_rules(PRIORITY_RULES, text, keywords_found)

        return ClassificationDecision(
            category=category or Category.OTHER.value,
            priority=priority or Priority.MEDIUM.value,
            confidence=min(1.0, (category_score + priority_score) / 4),
            reasoning=(
                f"Category inferred from {category_score} keyword hits; "
                f"priority from {priority_score} hits."
            ),
            keywords_found=keywords_found,
        )

    def classify(self, ticket: Ticket) -> Tuple[ClassificationDecision, Ticket]:
        """
        Classify a ticket and record the decision in the classification log.

        Only `category`, `priority` and `classification_confidence` change on
        the returned ticket; `updated_at` is left to the caller.
        """
        decision = self.decide(ticket.subject, ticket.description)

        self.store.append_log(ClassificationLogEntry(
            ticket_id=ticket.id,
            decision=decision,
            timestamp=datetime.now(timezone.utc),
        ))
        logger.info(
            f"Classified ticket {ticket.id}: category={decision.category} "
            f"priority={decision.priority} confidence={decision.confidence:.2f}"
        )

        updated = ticket.model_copy(update={
            "category": decision.category,
            "priority": decision.priority,
            "classification_confidence": decision.confidence,
        })
        return decision, updated
