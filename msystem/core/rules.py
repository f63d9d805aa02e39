"""
Evolution rules of the M system.

Rules rewrite the tile complex:
    left side objects → right side objects

Rules can be:
- Metabolic rules (driven by a protein, no geometry involved)
- Create rules (a new tile attaches to a free connector)
- Destroy rules (a tile is removed)
- Insert rules (a rod is spliced between two attached connectors)
- Divide rules (a bond between two glues is cut)

Each structural rule type expects a specific shape of its object lists;
validate_shape() checks it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union
from enum import Enum

from .glue import Glue
from .objects import CatalogError, FloatingObject, Protein
from .tile import Tile


RuleObject = Union[Tile, Glue, FloatingObject, Protein, str]


class RuleType(Enum):
    """Types of rules in the system."""
    METABOLIC = "metabolic"
    CREATE = "create"       # New tile attached to a connector
    DESTROY = "destroy"     # Tile removed
    INSERT = "insert"       # Rod spliced between two connectors
    DIVIDE = "divide"       # Bond between two glues cut


class MetabolicSubtype(Enum):
    """How a metabolic rule moves floating objects across the protein's face."""
    SYMPORT = "symport"      # Objects cross together
    ANTIPORT = "antiport"    # Objects swap sides
    CATALYTIC = "catalytic"  # Objects change on one side


def _name_of(obj: RuleObject) -> str:
    return obj if isinstance(obj, str) else obj.name


@dataclass(eq=False)
class EvolutionRule:
    """
    Rewriting rule: left side objects → right side objects.

    Priority grouping is exposed to the scheduler, its ordering meaning is
    the scheduler's policy.
    """
    rule_type: RuleType
    left_side_objects: List[RuleObject] = field(default_factory=list)
    right_side_objects: List[RuleObject] = field(default_factory=list)
    priority: int = 0
    name: str = ""

    @property
    def is_metabolic(self) -> bool:
        return self.rule_type == RuleType.METABOLIC

    def validate_shape(self) -> None:
        """Raise CatalogError if the object lists do not fit the rule type."""

    def __str__(self) -> str:
        left = ", ".join(_name_of(o) for o in self.left_side_objects)
        right = ", ".join(_name_of(o) for o in self.right_side_objects)
        label = f"'{self.name}' " if self.name else ""
        return f"{self.rule_type.value} {label}[{left}] → [{right}] priority {self.priority}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"


@dataclass(eq=False)
class MetabolicRule(EvolutionRule):
    """Pure state transform of floating objects, driven by a protein."""
    rule_type: RuleType = RuleType.METABOLIC
    protein: Optional[Protein] = None
    subtype: MetabolicSubtype = MetabolicSubtype.CATALYTIC

    def validate_shape(self) -> None:
        if self.rule_type != RuleType.METABOLIC:
            raise CatalogError("metabolic rule must have type METABOLIC", entity=self.name or None,
                               expected=RuleType.METABOLIC.value, observed=self.rule_type.value)
        if self.protein is None:
            raise CatalogError("metabolic rule needs a protein", entity=self.name or str(self))


# Expected object-list shapes of structural rules:
# rule type -> (side, object class, count)
_SHAPES = {
    RuleType.CREATE: ("right", Tile, 1),
    RuleType.INSERT: ("right", Tile, 1),
    RuleType.DESTROY: ("left", Tile, 1),
    RuleType.DIVIDE: ("right", Glue, 2),
}


@dataclass(eq=False)
class NonMetabolicRule(EvolutionRule):
    """
    Create, destroy, insert or divide rule.

    Example:
        rule = NonMetabolicRule(
            RuleType.CREATE,
            left_side_objects=[FloatingObject("a")],
            right_side_objects=[rod_tile],
        )
        rule.product_tile    # rod_tile
    """

    def _objects_of(self, side: str, kind: type) -> List[RuleObject]:
        objects = self.right_side_objects if side == "right" else self.left_side_objects
        return [o for o in objects if isinstance(o, kind)]

    def validate_shape(self) -> None:
        if self.rule_type not in _SHAPES:
            raise CatalogError("structural rule cannot have type METABOLIC", entity=self.name or None,
                               expected="create/destroy/insert/divide", observed=self.rule_type.value)
        side, kind, expected = _SHAPES[self.rule_type]
        found = self._objects_of(side, kind)
        if len(found) != expected:
            raise CatalogError(
                f"{self.rule_type.value} rule needs {expected} {kind.__name__} on the {side} side",
                entity=self.name or str(self),
                expected=expected,
                observed=len(found),
            )

    @property
    def product_tile(self) -> Tile:
        """The single tile created or inserted by this rule."""
        self.validate_shape()
        if self.rule_type not in (RuleType.CREATE, RuleType.INSERT):
            raise CatalogError(f"{self.rule_type.value} rule has no product tile", entity=self.name or None)
        return self._objects_of("right", Tile)[0]

    @property
    def target_tile(self) -> Tile:
        """The single tile removed by a destroy rule."""
        self.validate_shape()
        if self.rule_type != RuleType.DESTROY:
            raise CatalogError(f"{self.rule_type.value} rule has no target tile", entity=self.name or None)
        return self._objects_of("left", Tile)[0]

    @property
    def divided_glues(self) -> Tuple[Glue, Glue]:
        """The two glues separated by a divide rule, in catalog order."""
        self.validate_shape()
        if self.rule_type != RuleType.DIVIDE:
            raise CatalogError(f"{self.rule_type.value} rule divides no glues", entity=self.name or None)
        first, second = self._objects_of("right", Glue)
        return first, second
