"""Authoring-time validation of question schemas and rule documents.

``validate_schema`` runs every structural, per-question, reference and cycle
check in a single pass and returns a ``ValidationReport``; it never raises.
Structural problems (not an object, no ``questions`` list, empty list)
short-circuit to one top-level error. Everything else accumulates so an editor
can show every problem at once.

Scoring and risk rule documents are optional and validated separately, then
combined with the schema by ``validate_test_data``.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Any, Dict, List, Mapping, Optional, Sequence
import logging

from app.logic.condition_normalizer import (
    normalize_condition,
    raw_question_ref,
    raw_show_if,
)
from app.logic.cycle_detection import find_cycles, format_cycle
from app.logic.dependency_graph import build_graph
from app.logic.validation import SchemaValidationError
from app.models.conditions import CONDITION_OPERATORS
from app.models.question import (
    CHOICE_QUESTION_TYPES,
    DEFAULT_QUESTION_TYPE,
    TEXT_QUESTION_TYPES,
    VALID_QUESTION_TYPES,
    Question,
    QuestionType,
    ValidatedSchema,
)
from app.models.validation import ValidationReport


logger = logging.getLogger(__name__)

SCORING_TYPES = ("sum", "weighted_sum")
RISK_RESERVED_KEYS = frozenset({"triggers", "helpText", "help_text"})
# Authored camelCase keys and the snake_case names Question also accepts
FIELD_NAME_PAIRS = {"isCritical": "is_critical", "helpText": "help_text", "maxLength": "max_length"}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or value.strip() == ""


def _authored(question: Mapping, key: str) -> Any:
    """Read a question field by its camelCase key, falling back to the snake_case name."""
    value = question.get(key)
    if value is None and key in FIELD_NAME_PAIRS:
        value = question.get(FIELD_NAME_PAIRS[key])
    return value


def _report(errors: List[str], warnings: List[str], question_errors: Dict[str, List[str]]) -> ValidationReport:
    return ValidationReport(
        valid=not errors,
        errors=errors,
        warnings=warnings,
        question_errors=question_errors,
    )


def _structural_error(schema: Any) -> Optional[str]:
    if not isinstance(schema, Mapping):
        return "Schema must be an object"
    questions = schema.get("questions")
    if questions is None:
        return 'Schema must contain a "questions" array'
    if not isinstance(questions, list):
        return '"questions" must be an array'
    if not questions:
        return "Schema must contain at least one question"
    return None


def _walk_condition_refs(node: Any, path: str, out: list[tuple[str, str, bool]]) -> None:
    """Collect ``(path, question_id, has_operator)`` for every referencing node.

    Follows every branch that is present, including ones the normalizer would
    shadow, so a dangling id is reported wherever it was authored.
    """
    if isinstance(node, (list, tuple)):
        for idx, child in enumerate(node):
            _walk_condition_refs(child, f"{path}[{idx}]", out)
        return
    if not isinstance(node, Mapping):
        return
    connective = False
    for key in ("and", "or"):
        children = node.get(key)
        if isinstance(children, (list, tuple)):
            connective = True
            for idx, child in enumerate(children):
                _walk_condition_refs(child, f"{path}.{key}[{idx}]", out)
    if node.get("not") is not None:
        connective = True
        _walk_condition_refs(node["not"], f"{path}.not", out)
    ref = raw_question_ref(node)
    if ref is not None:
        has_operator = any(op in node for op in CONDITION_OPERATORS)
        out.append((path, ref, has_operator or connective))


def _check_identity(question: Mapping, prefix: str, seen_ids: set[str]) -> List[str]:
    errors: List[str] = []
    qid = question.get("id")
    if qid is None or qid == "":
        errors.append(f'{prefix}: Missing required field "id"')
    elif not isinstance(qid, str):
        errors.append(f'{prefix}: "id" must be a string')
    elif qid.strip() == "":
        errors.append(f'{prefix}: "id" cannot be empty')
    elif qid in seen_ids:
        errors.append(f'{prefix}: Duplicate question ID "{qid}"')
    else:
        seen_ids.add(qid)

    text = question.get("text")
    if text is None or text == "":
        errors.append(f'{prefix}: Missing required field "text"')
    elif not isinstance(text, str):
        errors.append(f'{prefix}: "text" must be a string')
    elif text.strip() == "":
        errors.append(f'{prefix}: "text" cannot be empty')
    return errors


def _check_type_constraints(question: Mapping, prefix: str, qtype: Any) -> List[str]:
    errors: List[str] = []
    if qtype not in VALID_QUESTION_TYPES:
        errors.append(f'{prefix}: Invalid type "{qtype}". Valid types: {", ".join(VALID_QUESTION_TYPES)}')
        return errors

    if qtype in CHOICE_QUESTION_TYPES:
        options = question.get("options")
        if not isinstance(options, list):
            errors.append(f'{prefix}: Type "{qtype}" requires an "options" array')
        elif len(options) < 2:
            errors.append(f'{prefix}: Type "{qtype}" requires at least 2 options')
        else:
            for idx, option in enumerate(options, start=1):
                opt_prefix = f"{prefix}, Option {idx}"
                if not isinstance(option, Mapping):
                    errors.append(f"{opt_prefix}: must be an object")
                    continue
                if option.get("value") is None:
                    errors.append(f'{opt_prefix}: Missing required field "value"')
                if _is_blank(option.get("label")):
                    errors.append(f'{opt_prefix}: Missing or invalid "label"')

    if qtype == QuestionType.NUMERIC:
        lo, hi = question.get("min"), question.get("max")
        if lo is not None and not _is_number(lo):
            errors.append(f'{prefix}: "min" must be a number')
        if hi is not None and not _is_number(hi):
            errors.append(f'{prefix}: "max" must be a number')
        if _is_number(lo) and _is_number(hi) and lo > hi:
            errors.append(f'{prefix}: "min" ({lo}) cannot be greater than "max" ({hi})')
        if question.get("step") is not None and not _is_number(question.get("step")):
            errors.append(f'{prefix}: "step" must be a number')

    if qtype in TEXT_QUESTION_TYPES:
        max_length = _authored(question, "maxLength")
        if max_length is not None:
            if not _is_number(max_length):
                errors.append(f'{prefix}: "maxLength" must be a number')
            elif max_length < 1:
                errors.append(f'{prefix}: "maxLength" must be at least 1')
        if qtype == QuestionType.TEXTAREA and question.get("rows") is not None and not _is_number(question.get("rows")):
            errors.append(f'{prefix}: "rows" must be a number')
    return errors


def _field_type_warnings(question: Mapping, prefix: str) -> List[str]:
    warnings: List[str] = []
    if question.get("order") is not None and not _is_number(question.get("order")):
        warnings.append(f'{prefix}: "order" should be a number')
    if question.get("required") is not None and not isinstance(question.get("required"), bool):
        warnings.append(f'{prefix}: "required" should be a boolean')
    if _authored(question, "isCritical") is not None and not isinstance(_authored(question, "isCritical"), bool):
        warnings.append(f'{prefix}: "isCritical" should be a boolean')
    if _authored(question, "helpText") is not None and not isinstance(_authored(question, "helpText"), str):
        warnings.append(f'{prefix}: "helpText" should be a string')
    return warnings


def _check_show_if(question: Mapping, prefix: str, known_ids: set[str]) -> tuple[List[str], List[str]]:
    errors: List[str] = []
    warnings: List[str] = []
    show_if = raw_show_if(question)
    if show_if is None:
        return errors, warnings
    if not isinstance(show_if, (Mapping, list, tuple)):
        errors.append(f'{prefix}: "show_if" must be an object or array')
        return errors, warnings
    refs: list[tuple[str, str, bool]] = []
    _walk_condition_refs(show_if, "show_if", refs)
    for path, ref, has_operator in refs:
        if ref not in known_ids:
            errors.append(f'{prefix}: "{path}" references non-existent question "{ref}"')
        elif not has_operator:
            warnings.append(
                f'{prefix}: "{path}" references question "{ref}" but has no operator '
                f'({", ".join(CONDITION_OPERATORS)}); it will never match'
            )
    return errors, warnings


def validate_schema(schema: Any) -> ValidationReport:
    """Validate a schema document ``{questions: [...]}``.

    Returns a report whose ``valid`` flag equals ``not errors``. Errors that
    belong to one question are also listed under its id in
    ``question_errors``; cycle errors are listed under every id on the cycle.
    """
    structural = _structural_error(schema)
    if structural is not None:
        logger.info("schema_validation_rejected reason=%s", structural)
        return _report([structural], [], {})

    questions: list = schema["questions"]
    errors: List[str] = []
    warnings: List[str] = []
    question_errors: Dict[str, List[str]] = {}
    seen_ids: set[str] = set()
    known_ids = {
        q.get("id") for q in questions if isinstance(q, Mapping) and isinstance(q.get("id"), str)
    }
    orders: "OrderedDict[Any, List[str]]" = OrderedDict()

    for index, question in enumerate(questions, start=1):
        prefix = f"Question {index}"
        if not isinstance(question, Mapping):
            errors.append(f"{prefix}: must be an object")
            continue

        own: List[str] = []
        own.extend(_check_identity(question, prefix, seen_ids))
        qtype = question.get("type") or DEFAULT_QUESTION_TYPE
        own.extend(_check_type_constraints(question, prefix, qtype))
        warnings.extend(_field_type_warnings(question, prefix))

        if _authored(question, "isCritical") is True and _is_blank(_authored(question, "helpText")):
            own.append(f'{prefix}: Critical questions must have "helpText" for safety information')

        ref_errors, ref_warnings = _check_show_if(question, prefix, known_ids)
        own.extend(ref_errors)
        warnings.extend(ref_warnings)

        qid = question.get("id")
        if _is_number(question.get("order")) and isinstance(qid, str):
            orders.setdefault(question["order"], []).append(qid)

        errors.extend(own)
        if own and isinstance(qid, str) and qid.strip():
            question_errors.setdefault(qid, []).extend(own)

    for order, ids in orders.items():
        if len(ids) > 1:
            warnings.append(f"Multiple questions have the same order value ({order}): {', '.join(ids)}")

    cycle_report = find_cycles(build_graph(questions))
    for number, cycle in enumerate(cycle_report.cycles, start=1):
        chain = format_cycle(cycle)
        message = f"Circular dependency detected in show_if conditions (Cycle {number}): {chain}"
        errors.append(message)
        warnings.append(f"Circular dependency in show_if: {chain}. This will cause infinite loops.")
        for qid in dict.fromkeys(cycle):
            question_errors.setdefault(qid, []).append(message)

    logger.info(
        "schema_validation_completed questions=%d errors=%d warnings=%d cycles=%d",
        len(questions),
        len(errors),
        len(warnings),
        len(cycle_report.cycles),
    )
    return _report(errors, warnings, question_errors)


def validated_schema(schema: Any) -> ValidatedSchema:
    """Validate ``schema`` and return it as a ``ValidatedSchema``.

    Raises ``SchemaValidationError`` (carrying the full report) when the
    schema has any error, including a dependency cycle.
    """
    report = validate_schema(schema)
    if not report.valid:
        raise SchemaValidationError(report)
    questions = tuple(Question.model_validate(q) for q in schema["questions"])
    return ValidatedSchema(questions=questions, dependencies=build_graph(questions))


def _check_bands(bands: Any, label: str, errors: List[str]) -> None:
    if not isinstance(bands, list):
        errors.append(f'"bands" in {label} must be an array')
        return
    for idx, band in enumerate(bands, start=1):
        if not isinstance(band, Mapping):
            errors.append(f"Band {idx} must be an object")
            continue
        lo, hi = band.get("min"), band.get("max")
        if not _is_number(lo):
            errors.append(f'Band {idx}: "min" is required and must be a number')
        if not _is_number(hi):
            errors.append(f'Band {idx}: "max" is required and must be a number')
        if _is_number(lo) and _is_number(hi) and lo > hi:
            errors.append(f'Band {idx}: "min" ({lo}) cannot be greater than "max" ({hi})')
        if _is_blank(band.get("label")):
            errors.append(f'Band {idx}: "label" is required and must be a string')


def _check_item_list(items: Any, label: str, question_ids: Optional[Sequence[str]], errors: List[str]) -> None:
    if not isinstance(items, list):
        errors.append(f"{label} must be an array")
        return
    if question_ids is None:
        return
    for idx, item in enumerate(items, start=1):
        if item not in question_ids:
            errors.append(f'{label} item {idx} ("{item}") does not match any question ID')


def validate_scoring_rules(rules: Any, question_ids: Optional[Sequence[str]] = None) -> ValidationReport:
    """Validate an optional scoring rule document.

    When ``question_ids`` is None (schema not trusted yet) reference checks
    are skipped and only shapes are validated.
    """
    errors: List[str] = []
    if not isinstance(rules, Mapping):
        return _report(errors, [], {})

    rtype = rules.get("type")
    if rtype is not None and rtype not in SCORING_TYPES:
        errors.append(f'Invalid scoring type "{rtype}". Valid types: {", ".join(SCORING_TYPES)}')

    if rules.get("items") is not None:
        items = rules["items"]
        if not isinstance(items, list):
            errors.append('"items" in scoringRules must be an array')
        elif question_ids is not None:
            for idx, item in enumerate(items, start=1):
                if item not in question_ids:
                    errors.append(f'Scoring item {idx} ("{item}") does not match any question ID')

    weights = rules.get("weights")
    if weights is not None:
        if not isinstance(weights, Mapping):
            errors.append('"weights" in scoringRules must be an object')
        else:
            for qid, weight in weights.items():
                if question_ids is not None and qid not in question_ids:
                    errors.append(f'Weight for question "{qid}" does not match any question ID')
                if not _is_number(weight):
                    errors.append(f'Weight for question "{qid}" must be a number')

    subscales = rules.get("subscales")
    if subscales is not None:
        if not isinstance(subscales, Mapping):
            errors.append('"subscales" in scoringRules must be an object')
        else:
            for name, items in subscales.items():
                _check_item_list(items, f'Subscale "{name}"', question_ids, errors)

    if rules.get("bands") is not None:
        _check_bands(rules["bands"], "scoringRules", errors)

    categories = rules.get("categories")
    if categories is not None:
        if not isinstance(categories, Mapping):
            errors.append('"categories" in scoringRules must be an object')
        else:
            for name, category in categories.items():
                if not isinstance(category, Mapping):
                    errors.append(f'Category "{name}" must be an object')
                    continue
                _check_item_list(category.get("items"), f'Category "{name}"', question_ids, errors)
                multiplier = category.get("multiplier")
                if multiplier is not None and not _is_number(multiplier):
                    errors.append(f'Category "{name}": "multiplier" must be a number')
                if category.get("bands") is not None:
                    _check_bands(category["bands"], f'category "{name}"', errors)

    return _report(errors, [], {})


def _check_trigger_refs(label: str, condition: Any, question_ids: Optional[Sequence[str]], errors: List[str]) -> None:
    refs: list[tuple[str, str, bool]] = []
    _walk_condition_refs(condition, "condition", refs)
    if normalize_condition(condition) is None:
        errors.append(f"{label}: has no trigger condition")
        return
    for _path, ref, has_operator in refs:
        if question_ids is not None and ref not in question_ids:
            errors.append(f'{label}: Question ID "{ref}" does not exist')
        if not has_operator:
            errors.append(
                f"{label}: Must have at least one condition operator ({', '.join(CONDITION_OPERATORS)})"
            )


def validate_risk_rules(rules: Any, question_ids: Optional[Sequence[str]] = None) -> ValidationReport:
    """Validate an optional risk rule document.

    Both the legacy ``{triggers: [...]}`` list and the named-rule mapping
    ``{rule_name: {<condition>, helpText}}`` are accepted.
    """
    errors: List[str] = []
    if not isinstance(rules, Mapping):
        return _report(errors, [], {})

    triggers = rules.get("triggers")
    if triggers is not None:
        if not isinstance(triggers, list):
            errors.append('"triggers" in riskRules must be an array')
        else:
            for idx, trigger in enumerate(triggers, start=1):
                label = f"Trigger {idx}"
                if not isinstance(trigger, Mapping):
                    errors.append(f"{label} must be an object")
                    continue
                qid = trigger.get("questionId")
                if not qid:
                    errors.append(f'{label}: "questionId" is required')
                elif question_ids is not None and qid not in question_ids:
                    errors.append(f'{label}: Question ID "{qid}" does not exist')
                if not any(trigger.get(op) is not None for op in CONDITION_OPERATORS):
                    errors.append(
                        f"{label}: Must have at least one condition operator ({', '.join(CONDITION_OPERATORS)})"
                    )
                if _is_blank(trigger.get("flag")):
                    errors.append(f'{label}: "flag" is required and must be a string')

    for name, rule in rules.items():
        if name in RISK_RESERVED_KEYS:
            continue
        label = f'Risk rule "{name}"'
        if not isinstance(rule, Mapping):
            errors.append(f"{label} must be an object")
            continue
        condition = rule.get("when", rule.get("condition", rule))
        _check_trigger_refs(label, condition, question_ids, errors)
        help_text = rule.get("helpText", rule.get("help_text"))
        if help_text is not None and not isinstance(help_text, str):
            errors.append(f'{label}: "helpText" must be a string')

    return _report(errors, [], {})


def validate_test_data(test: Any) -> ValidationReport:
    """Validate a complete test document: title, schema, scoring and risk rules.

    Rule documents are checked against the schema's question ids only when
    the schema itself is valid.
    """
    if not isinstance(test, Mapping):
        return _report(["Test must be an object"], [], {})

    errors: List[str] = []
    warnings: List[str] = []
    if _is_blank(test.get("title")):
        errors.append("Title is required")

    schema = test.get("schemaJson")
    if schema is None:
        errors.append("schemaJson is required")
        return _report(errors, warnings, {})

    schema_report = validate_schema(schema)
    errors.extend(schema_report.errors)
    warnings.extend(schema_report.warnings)

    question_ids: Optional[List[str]] = None
    if schema_report.valid:
        question_ids = [q["id"] for q in schema["questions"]]

    if test.get("scoringRules"):
        errors.extend(validate_scoring_rules(test["scoringRules"], question_ids).errors)
    if test.get("riskRules"):
        errors.extend(validate_risk_rules(test["riskRules"], question_ids).errors)

    return _report(errors, warnings, schema_report.question_errors)


__all__ = [
    "SCORING_TYPES",
    "validate_risk_rules",
    "validate_schema",
    "validate_scoring_rules",
    "validate_test_data",
    "validated_schema",
]
