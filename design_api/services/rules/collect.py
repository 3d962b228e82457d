"""Collect, convert to explicit, deduplicate and remove disallowed rules.

Resolution order:
1. Switch on the ``OUT``/``EMPTY`` boundary modules when any rule uses them.
2. Add the boundary modules and their self-adjacency rules.
3. Expand disallowed typed rules into explicit ones.
4. Expand an allowed typed rule only when a disallowed rule names its
   connector; keep the remaining typed rules as they are.
5. Deduplicate the allowed rules and drop every disallowed one.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from design_api.constants import (
    DEFAULT_INCLUDE_EMPTY,
    DEFAULT_INCLUDE_OUT,
    EMPTY_TAG,
    INDIFFERENT_TAG,
    OUTER_TAG,
)
from .model import Module, Rule, RuleExplicit, RuleTyped, rule_involves

logger = logging.getLogger(__name__)


def _dedup(rules: Iterable[Rule]) -> List[Rule]:
    return list(dict.fromkeys(rules))


def _split(rules: Iterable[Rule]) -> tuple[List[RuleExplicit], List[RuleTyped]]:
    explicit: List[RuleExplicit] = []
    typed: List[RuleTyped] = []
    for rule in rules:
        if isinstance(rule, RuleExplicit):
            explicit.append(rule)
        elif isinstance(rule, RuleTyped):
            typed.append(rule)
        else:
            raise TypeError(f"Not a rule: {rule!r}")
    return explicit, typed


def _conflicts(rule: RuleTyped, disallowed: Sequence[Rule]) -> bool:
    """True when a disallowed explicit rule names the connector of ``rule``."""
    return any(
        isinstance(other, RuleExplicit)
        and other.names_connector(rule.module_name, rule.connector_index)
        for other in disallowed
    )


def collect_rules(
    modules: Optional[Sequence[Module]],
    rules_allowed: Optional[Sequence[Rule]],
    rules_disallowed: Optional[Sequence[Rule]] = None,
    include_out: bool = DEFAULT_INCLUDE_OUT,
    include_empty: bool = DEFAULT_INCLUDE_EMPTY,
) -> Optional[List[Rule]]:
    """Resolve allowed and disallowed rules into the final rule list.

    Parameters
    ----------
    modules:
        Modules used to look up connectors while expanding typed rules.
    rules_allowed:
        Allowed rules, explicit or typed.
    rules_disallowed:
        Optional disallowed rules, explicit or typed.
    include_out, include_empty:
        Generate the boundary module and its rules. Forced on when any rule
        references the module by name.

    Returns
    -------
    list or None
        Deduplicated rules in first-seen order. Typed rules without a
        conflicting disallowed rule are returned unexpanded. ``None`` when a
        required input is missing.
    """
    if modules is None:
        logger.info("No modules supplied; rules are not collected")
        return None
    if rules_allowed is None:
        logger.info("No allowed rules supplied; rules are not collected")
        return None

    modules = list(modules)
    rules_allowed = list(rules_allowed)
    rules_disallowed = list(rules_disallowed or [])

    all_rules = rules_allowed + rules_disallowed
    if not include_out and any(rule_involves(r, OUTER_TAG) for r in all_rules):
        logger.debug("Rules reference %s; enabling its rules", OUTER_TAG)
        include_out = True
    if not include_empty and any(rule_involves(r, EMPTY_TAG) for r in all_rules):
        logger.debug("Rules reference %s; enabling its rules", EMPTY_TAG)
        include_empty = True

    for enabled, tag in ((include_out, OUTER_TAG), (include_empty, EMPTY_TAG)):
        if not enabled:
            continue
        boundary_module, boundary_rules = Module.named_empty(
            tag, INDIFFERENT_TAG, (1.0, 1.0, 1.0)
        )
        rules_allowed.extend(boundary_rules)
        modules.append(boundary_module)

    disallowed_explicit, disallowed_typed = _split(rules_disallowed)
    disallowed_unwrapped: List[Rule] = []
    for rule in disallowed_typed:
        disallowed_unwrapped.extend(rule.to_rules_explicit(disallowed_typed, modules))
    disallowed_processed = _dedup(disallowed_explicit + disallowed_unwrapped)

    _, allowed_typed = _split(rules_allowed)
    allowed_explicit: List[Rule] = []
    allowed_typed_unwrapped: List[Rule] = []
    allowed_typed_wrapped: List[Rule] = []
    for rule in rules_allowed:
        if isinstance(rule, RuleExplicit):
            allowed_explicit.append(rule)
        elif _conflicts(rule, disallowed_processed):
            allowed_typed_unwrapped.extend(rule.to_rules_explicit(allowed_typed, modules))
        else:
            allowed_typed_wrapped.append(rule)

    allowed_processed = _dedup(
        allowed_explicit + allowed_typed_unwrapped + allowed_typed_wrapped
    )
    disallowed_set = set(disallowed_processed)
    rules = [rule for rule in allowed_processed if rule not in disallowed_set]

    logger.debug(
        "Collected %d rules (%d explicit, %d unwrapped, %d wrapped, %d disallowed)",
        len(rules),
        len(allowed_explicit),
        len(allowed_typed_unwrapped),
        len(allowed_typed_wrapped),
        len(disallowed_processed),
    )
    return rules
