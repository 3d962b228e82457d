"""Modules, connectors and adjacency rules.

Rules come in two variants. An explicit rule names a concrete connector on
both sides; a typed rule names one connector and a connector type, standing
for every opposite connector that carries the same type. ``Rule`` is the
union of both and every consumer dispatches over the two variants.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from design_api.constants import INDIFFERENT_TAG

logger = logging.getLogger(__name__)

CONNECTOR_COUNT = 6


class Direction(IntEnum):
    """Face directions of a module cell, in connector index order."""

    X_POSITIVE = 0
    Y_POSITIVE = 1
    Z_POSITIVE = 2
    X_NEGATIVE = 3
    Y_NEGATIVE = 4
    Z_NEGATIVE = 5

    def opposite(self) -> "Direction":
        return Direction((self.value + 3) % CONNECTOR_COUNT)

    def is_opposite(self, other: "Direction") -> bool:
        return self.opposite() == other


@dataclass(frozen=True)
class Connector:
    index: int
    direction: Direction
    connector_type: str = INDIFFERENT_TAG


@dataclass(frozen=True)
class Module:
    """A named design unit with one connector per face of its cell.

    Only the name, the cell dimensions and the connectors take part in rule
    resolution; module geometry lives elsewhere.
    """

    name: str
    dimensions: Tuple[float, float, float] = (1.0, 1.0, 1.0)
    connectors: Tuple[Connector, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Module name must be a non-empty string")
        dims = tuple(float(d) for d in self.dimensions)
        if len(dims) != 3 or any(d <= 0 for d in dims):
            raise ValueError(
                f"Module '{self.name}': dimensions must be three positive numbers, got {self.dimensions}"
            )
        object.__setattr__(self, "dimensions", dims)
        connectors = tuple(self.connectors)
        if not connectors:
            connectors = tuple(
                Connector(d.value, d, INDIFFERENT_TAG) for d in Direction
            )
        if len(connectors) != CONNECTOR_COUNT:
            raise ValueError(
                f"Module '{self.name}': expected {CONNECTOR_COUNT} connectors, got {len(connectors)}"
            )
        for idx, connector in enumerate(connectors):
            if connector.index != idx or connector.direction != Direction(idx):
                raise ValueError(
                    f"Module '{self.name}': connector {idx} must face {Direction(idx).name}"
                )
        object.__setattr__(self, "connectors", connectors)

    @classmethod
    def from_connector_types(
        cls,
        name: str,
        dimensions: Sequence[float] = (1.0, 1.0, 1.0),
        connector_types: Optional[Sequence[str]] = None,
    ) -> "Module":
        types = list(connector_types) if connector_types is not None else [INDIFFERENT_TAG] * CONNECTOR_COUNT
        if len(types) != CONNECTOR_COUNT:
            raise ValueError(
                f"Module '{name}': expected {CONNECTOR_COUNT} connector types, got {len(types)}"
            )
        connectors = tuple(
            Connector(d.value, d, str(t)) for d, t in zip(Direction, types)
        )
        return cls(name=name, dimensions=tuple(dimensions), connectors=connectors)

    @classmethod
    def named_empty(
        cls,
        name: str,
        connector_type: str = INDIFFERENT_TAG,
        dimensions: Sequence[float] = (1.0, 1.0, 1.0),
    ) -> Tuple["Module", List["RuleExplicit"]]:
        """Create an abstract module together with its self-adjacency rules.

        Every connector may touch the opposite connector of another instance
        of the same module, which lets boundary modules such as ``OUT`` fill
        any run of slots.
        """
        module = cls.from_connector_types(
            name, dimensions, [connector_type] * CONNECTOR_COUNT
        )
        rules = [
            RuleExplicit(name, connector.index, name, connector.direction.opposite().value)
            for connector in module.connectors
        ]
        return module, rules

    def connector(self, index: int) -> Optional[Connector]:
        if 0 <= index < len(self.connectors):
            return self.connectors[index]
        return None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "dimensions": list(self.dimensions),
            "connector_types": [c.connector_type for c in self.connectors],
        }


def find_module(modules: Iterable[Module], name: str) -> Optional[Module]:
    """Return the first module called ``name``."""
    for module in modules:
        if module.name == name:
            return module
    return None


@dataclass(frozen=True)
class RuleExplicit:
    """Connector ``source_connector_index`` of the source module may touch
    connector ``target_connector_index`` of the target module."""

    source_module_name: str
    source_connector_index: int
    target_module_name: str
    target_connector_index: int

    def involves(self, module_name: str) -> bool:
        return module_name in (self.source_module_name, self.target_module_name)

    def names_connector(self, module_name: str, connector_index: int) -> bool:
        return (
            self.source_module_name == module_name
            and self.source_connector_index == connector_index
        ) or (
            self.target_module_name == module_name
            and self.target_connector_index == connector_index
        )

    def to_dict(self) -> dict:
        return {
            "source_module": self.source_module_name,
            "source_connector": self.source_connector_index,
            "target_module": self.target_module_name,
            "target_connector": self.target_connector_index,
        }


@dataclass(frozen=True)
class RuleTyped:
    """Connector ``connector_index`` of ``module_name`` may touch any opposite
    connector of type ``connector_type``."""

    module_name: str
    connector_index: int
    connector_type: str

    def involves(self, module_name: str) -> bool:
        return self.module_name == module_name

    def to_rules_explicit(
        self,
        other_rules: Iterable["RuleTyped"],
        modules: Sequence[Module],
    ) -> List[RuleExplicit]:
        """Expand into the explicit rules this typed rule stands for.

        Candidates are the connectors tagged with ``connector_type``, taken
        first from ``other_rules`` and then from the connectors of
        ``modules``. A candidate is paired only when it faces the opposite
        direction, which includes the module's own opposite face.
        """
        module = find_module(modules, self.module_name)
        if module is None:
            logger.warning(
                "Typed rule references unknown module %s; nothing to expand",
                self.module_name,
            )
            return []
        connector = module.connector(self.connector_index)
        if connector is None:
            logger.warning(
                "Typed rule references connector %s of module %s which does not exist",
                self.connector_index,
                self.module_name,
            )
            return []

        candidates: Dict[Tuple[str, int], None] = {}
        for other in other_rules:
            if other.connector_type == self.connector_type:
                candidates.setdefault((other.module_name, other.connector_index))
        for other_module in modules:
            for other_connector in other_module.connectors:
                if other_connector.connector_type == self.connector_type:
                    candidates.setdefault((other_module.name, other_connector.index))

        rules: List[RuleExplicit] = []
        for other_name, other_index in candidates:
            other_module = find_module(modules, other_name)
            if other_module is None:
                continue
            other_connector = other_module.connector(other_index)
            if other_connector is None:
                continue
            if other_connector.direction.is_opposite(connector.direction):
                rules.append(
                    RuleExplicit(self.module_name, self.connector_index, other_name, other_index)
                )
        return rules

    def to_dict(self) -> dict:
        return {
            "module": self.module_name,
            "connector": self.connector_index,
            "connector_type": self.connector_type,
        }


Rule = Union[RuleExplicit, RuleTyped]


def rule_involves(rule: Rule, module_name: str) -> bool:
    if isinstance(rule, RuleExplicit):
        return rule.involves(module_name)
    if isinstance(rule, RuleTyped):
        return rule.involves(module_name)
    raise TypeError(f"Not a rule: {rule!r}")
