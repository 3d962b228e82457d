from .model import (
    Connector,
    Direction,
    Module,
    Rule,
    RuleExplicit,
    RuleTyped,
    find_module,
    rule_involves,
)
from .collect import collect_rules

__all__ = [
    "Connector",
    "Direction",
    "Module",
    "Rule",
    "RuleExplicit",
    "RuleTyped",
    "collect_rules",
    "find_module",
    "rule_involves",
]
