"""Risk flag evaluation.

Risk rules flag specific answer patterns independently of the total score.
Two document shapes are accepted:

- named rules: ``{"self_harm": {"questionId": "q9", "gte": 1, "helpText": "..."}}``
  where the condition may also sit under ``when``/``condition`` and may use
  ``and``/``or``/``not``;
- legacy triggers: ``{"triggers": [{"questionId": "q9", "equals": 3,
  "flag": "self_harm", "helpText": "..."}], "helpText": "..."}``.

Trigger conditions share the comparison semantics of visibility conditions.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, NamedTuple, Optional
import logging

from app.logic.condition_normalizer import normalize_condition
from app.logic.validation import coerce_answer_map
from app.logic.visibility_rules import evaluate_condition
from app.models.conditions import Condition, referenced_question_ids
from app.models.scoring import RiskFlag


logger = logging.getLogger(__name__)

RESERVED_KEYS = frozenset({"triggers", "helpText", "help_text"})
DEFAULT_FLAG = "risk"


class RiskRule(NamedTuple):
    name: str
    condition: Condition
    help_text: str


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def normalize_risk_rules(rules: Any) -> List[RiskRule]:
    """Flatten a risk rule document into ``RiskRule`` entries, in document order.

    Entries without a usable condition are skipped.
    """
    if not isinstance(rules, Mapping):
        return []
    default_help = _text(rules.get("helpText"))
    out: List[RiskRule] = []

    triggers = rules.get("triggers")
    if isinstance(triggers, list):
        for trigger in triggers:
            if not isinstance(trigger, Mapping) or not trigger.get("questionId"):
                continue
            condition = normalize_condition(trigger)
            if condition is None:
                continue
            name = str(trigger.get("flag") or DEFAULT_FLAG)
            out.append(RiskRule(name, condition, _text(trigger.get("helpText")) or default_help))

    for name, rule in rules.items():
        if name in RESERVED_KEYS or not isinstance(rule, Mapping):
            continue
        condition = normalize_condition(rule.get("when", rule.get("condition", rule)))
        if condition is None:
            continue
        help_text = _text(rule.get("helpText")) or _text(rule.get("help_text")) or default_help
        out.append(RiskRule(str(name), condition, help_text))
    return out


def evaluate_risk(rules: Any, answers: Any) -> Dict[str, RiskFlag]:
    """Return ``{rule_name: RiskFlag}`` for every rule whose condition holds.

    The first triggering rule for a name decides its help text; later ones
    only add their question ids. Returns an empty dict when nothing triggers.
    """
    answer_map = coerce_answer_map(answers)
    flags: Dict[str, RiskFlag] = {}
    for rule in normalize_risk_rules(rules):
        if not evaluate_condition(rule.condition, answer_map):
            continue
        refs = referenced_question_ids(rule.condition)
        existing = flags.get(rule.name)
        if existing is None:
            flags[rule.name] = RiskFlag(help_text=rule.help_text, question_ids=refs)
        else:
            existing.question_ids.extend(q for q in refs if q not in existing.question_ids)
    if flags:
        logger.info("risk_flags_triggered flags=%s", sorted(flags))
    return flags


def summarize_risk(rules: Any, flags: Mapping[str, RiskFlag]) -> Optional[str]:
    """Combined help text for a result interpretation, or None without flags.

    The document-level ``helpText`` leads, followed by the distinct per-flag
    help texts in flag order.
    """
    if not flags:
        return None
    base = _text(rules.get("helpText")).strip() if isinstance(rules, Mapping) else ""
    texts: List[str] = []
    for flag in flags.values():
        text = flag.help_text.strip()
        if text and text != base and text not in texts:
            texts.append(text)
    if base and texts:
        return base + "\n\n" + "\n".join(texts)
    return base or "\n".join(texts)


__all__ = ["RiskRule", "evaluate_risk", "normalize_risk_rules", "summarize_risk"]
