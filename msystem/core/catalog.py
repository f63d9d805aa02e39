"""
Catalog handed over by the loader: every named type of an M system plus
the glue relation, seed tiles and evolution rules.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, TypeVar

from .glue import Glue, GlueRelation
from .objects import CatalogError, FloatingObject, Protein
from .rules import EvolutionRule
from .tile import SeedTile, Tile

T = TypeVar("T")


def _by_name(items: Iterable[T], kind: str) -> Dict[str, T]:
    result: Dict[str, T] = {}
    for item in items:
        name = item.name
        if name in result:
            raise CatalogError(f"duplicate {kind} name", entity=name)
        result[name] = item
    return result


@dataclass
class Catalog:
    """
    Deserialized M system objects.

    Referential integrity (names used by rules and seeds exist) is the
    loader's responsibility.

    Example:
        catalog = Catalog.from_objects(
            tiles=[rod],
            glues=[Glue("a"), Glue("b")],
            glue_relation=GlueRelation([(Glue("a"), Glue("b"))]),
            evolution_rules=[create_rod],
        )
    """
    floating_objects: Dict[str, FloatingObject] = field(default_factory=dict)
    proteins: Dict[str, Protein] = field(default_factory=dict)
    tiles: Dict[str, Tile] = field(default_factory=dict)
    glues: Dict[str, Glue] = field(default_factory=dict)
    glue_relation: GlueRelation = field(default_factory=GlueRelation)
    seed_tiles: List[SeedTile] = field(default_factory=list)
    evolution_rules: List[EvolutionRule] = field(default_factory=list)
    glue_radius: float = 0.1

    @classmethod
    def from_objects(
        cls,
        floating_objects: Iterable[FloatingObject] = (),
        proteins: Iterable[Protein] = (),
        tiles: Iterable[Tile] = (),
        glues: Iterable[Glue] = (),
        glue_relation: Optional[GlueRelation] = None,
        seed_tiles: Iterable[SeedTile] = (),
        evolution_rules: Iterable[EvolutionRule] = (),
        glue_radius: float = 0.1,
    ) -> "Catalog":
        """Build the name-keyed catalog from plain lists."""
        return cls(
            floating_objects=_by_name(floating_objects, "floating object"),
            proteins=_by_name(proteins, "protein"),
            tiles=_by_name(tiles, "tile"),
            glues=_by_name(glues, "glue"),
            glue_relation=glue_relation if glue_relation is not None else GlueRelation(),
            seed_tiles=list(seed_tiles),
            evolution_rules=list(evolution_rules),
            glue_radius=glue_radius,
        )

    def is_empty(self) -> bool:
        return not (self.tiles or self.glues or self.evolution_rules or self.proteins or self.floating_objects)

    def __repr__(self) -> str:
        return (f"Catalog({len(self.tiles)} tiles, {len(self.glues)} glues, "
                f"{len(self.evolution_rules)} rules)")
