import logging
import reprlib
from typing import Any, List, Optional

from design_api.constants import INDIFFERENT_TAG
from design_api.services.rules.model import (
    CONNECTOR_COUNT,
    Module,
    Rule,
    RuleExplicit,
    RuleTyped,
)

logger = logging.getLogger(__name__)

_EXPLICIT_KEYS = ("source_module", "source_connector", "target_module", "target_connector")
_TYPED_KEYS = ("module", "connector", "connector_type")


class ValidationError(Exception):
    """Raised when a module or rule record cannot be parsed."""
    pass


def _module_name(value: Any, where: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{where}: module name must be a non-empty string")
    return value


def _connector_index(value: Any, where: str) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{where}: connector index must be an integer")
    if not 0 <= value < CONNECTOR_COUNT:
        raise ValidationError(
            f"{where}: connector index {value} out of range 0..{CONNECTOR_COUNT - 1}"
        )
    return value


def parse_module(data: Any, index: int = 0) -> Module:
    """Build a :class:`Module` from its JSON record.

    Parameters
    ----------
    data:
        ``{"name": str, "dimensions": [x, y, z], "connector_types": [6 x str]}``;
        ``dimensions`` defaults to a unit cell and ``connector_types`` to
        ``INDIFFERENT`` on every face.
    index:
        Position of the record, used in error messages.

    Raises
    ------
    ValidationError
        If the record is malformed.
    """
    where = f"Module {index}"
    if not isinstance(data, dict):
        raise ValidationError(f"{where}: expected an object, got {reprlib.repr(data)}")
    name = _module_name(data.get("name"), where)

    dimensions = data.get("dimensions", [1.0, 1.0, 1.0])
    if (
        not isinstance(dimensions, (list, tuple))
        or len(dimensions) != 3
        or not all(isinstance(d, (int, float)) and not isinstance(d, bool) for d in dimensions)
    ):
        raise ValidationError(f"{where}: 'dimensions' must be three numbers")
    if any(d <= 0 for d in dimensions):
        raise ValidationError(f"{where}: one or more module dimensions are not larger than 0")

    connector_types = data.get("connector_types", [INDIFFERENT_TAG] * CONNECTOR_COUNT)
    if (
        not isinstance(connector_types, (list, tuple))
        or len(connector_types) != CONNECTOR_COUNT
        or not all(isinstance(t, str) and t for t in connector_types)
    ):
        raise ValidationError(
            f"{where}: 'connector_types' must be {CONNECTOR_COUNT} non-empty strings"
        )

    try:
        return Module.from_connector_types(name, dimensions, connector_types)
    except ValueError as exc:
        raise ValidationError(f"{where}: {exc}") from exc


def parse_rule(data: Any, index: int = 0) -> Rule:
    """Build an explicit or typed rule from its JSON record.

    The variant is chosen by the keys present: ``source_module`` marks an
    explicit rule, ``connector_type`` a typed one.
    """
    where = f"Rule {index}"
    if not isinstance(data, dict):
        raise ValidationError(f"{where}: expected an object, got {reprlib.repr(data)}")

    is_explicit = "source_module" in data or "target_module" in data
    is_typed = "connector_type" in data
    if is_explicit and is_typed:
        raise ValidationError(f"{where}: a rule cannot be both explicit and typed")

    if is_explicit:
        missing = [k for k in _EXPLICIT_KEYS if k not in data]
        if missing:
            raise ValidationError(f"{where}: missing required field(s) {missing}")
        return RuleExplicit(
            _module_name(data["source_module"], where),
            _connector_index(data["source_connector"], where),
            _module_name(data["target_module"], where),
            _connector_index(data["target_connector"], where),
        )
    if is_typed:
        missing = [k for k in _TYPED_KEYS if k not in data]
        if missing:
            raise ValidationError(f"{where}: missing required field(s) {missing}")
        connector_type = data["connector_type"]
        if not isinstance(connector_type, str) or not connector_type:
            raise ValidationError(f"{where}: 'connector_type' must be a non-empty string")
        return RuleTyped(
            _module_name(data["module"], where),
            _connector_index(data["connector"], where),
            connector_type,
        )
    raise ValidationError(f"{where}: cannot tell whether the rule is explicit or typed")


def parse_modules(records: Optional[List[Any]]) -> Optional[List[Module]]:
    """Parse module records; ``None`` stays ``None`` so missing input is visible."""
    if records is None:
        return None
    modules = [parse_module(record, i) for i, record in enumerate(records)]
    names = [m.name for m in modules]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ValidationError(f"Duplicate module name(s): {duplicates}")
    return modules


def parse_rules(records: Optional[List[Any]]) -> Optional[List[Rule]]:
    if records is None:
        return None
    rules = [parse_rule(record, i) for i, record in enumerate(records)]
    logger.debug("Parsed %d rule records", len(rules))
    return rules
