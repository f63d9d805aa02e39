"""
Rule index of an M system.

The index is built once from a fully loaded catalog and is read-only
afterwards. It answers, in near constant time, which rules are
structurally eligible:

    protein name        → metabolic rules driven by that protein
    glue                → create rules whose product can attach to that glue
    (glue, glue)        → insert rules whose rod fits between the pair
    (glue, glue)        → divide rules separating exactly that pair
    tile name           → destroy rules removing that tile

Pair keys are registered under both orders. Every per-key list keeps the
catalog order of the rules.
"""

from __future__ import annotations
import logging
from itertools import combinations_with_replacement
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..config import MSystemConfig
from ..geometry import points_equal
from .catalog import Catalog
from .glue import Glue, GluePair, GlueRelation
from .objects import CatalogError, FloatingObject, Protein
from .rules import EvolutionRule, MetabolicRule, NonMetabolicRule, RuleType
from .tile import Connector, SeedTile, Tile, TileInSpace

logger = logging.getLogger(__name__)


RuleList = Tuple[NonMetabolicRule, ...]
AnyTile = Union[Tile, TileInSpace]


class PSystem:
    """
    M system used by the simulation loop.

    Example:
        psystem = PSystem(catalog)
        psystem.creation_rules_for(Glue("a"))
        psystem.division_rules_for(Glue("a"), Glue("b"))
        psystem.are_compatible(connector1, connector2)
    """

    def __init__(self, catalog: Catalog, config: Optional[MSystemConfig] = None):
        if catalog is None:
            logger.error("Cannot build rule index: no catalog given")
            raise CatalogError("M system catalog can't be None")

        self.config = config or MSystemConfig()
        if self.config.index.require_non_empty_catalog and catalog.is_empty():
            logger.error("Cannot build rule index: catalog is empty")
            raise CatalogError("M system catalog can't be empty")

        self.tolerance = self.config.geometry.tolerance
        self.side_dist = self.config.geometry.side_dist
        self.min_face_dist = self.config.geometry.min_face_dist

        self.floating_objects: Mapping[str, FloatingObject] = MappingProxyType(dict(catalog.floating_objects))
        self.proteins: Mapping[str, Protein] = MappingProxyType(dict(catalog.proteins))
        self.tiles: Mapping[str, Tile] = MappingProxyType(dict(catalog.tiles))
        self.glues: Mapping[str, Glue] = MappingProxyType(dict(catalog.glues))
        self.seed_tiles: Tuple[SeedTile, ...] = tuple(catalog.seed_tiles)
        self.glue_relation: GlueRelation = catalog.glue_relation
        self.glue_radius = catalog.glue_radius
        self.mobility = max((obj.mobility for obj in self.floating_objects.values()), default=0.0)
        self._evolution_rules: Tuple[EvolutionRule, ...] = tuple(catalog.evolution_rules)

        try:
            partition = self._partition(self._evolution_rules)
        except CatalogError as e:
            logger.error(f"Cannot build rule index: {e}")
            raise

        self.metabolic_rules = self._build_metabolic_index(partition[RuleType.METABOLIC])
        self.creation_rules, self.creation_rules_priorities = self._build_creation_index(
            partition[RuleType.CREATE])
        self.insertion_rules = self._build_insertion_index(partition[RuleType.INSERT])
        self.division_rules = self._build_division_index(partition[RuleType.DIVIDE])
        self.destruction_rules = self._build_destruction_index(partition[RuleType.DESTROY])

        if self.config.index.log_index_summary:
            logger.info(
                f"Rule index built: {len(self._evolution_rules)} rules, "
                f"{len(self.tiles)} tiles, {len(self.glues)} glues, "
                f"{len(self.proteins)} proteins"
            )

    # ===== Index construction =====

    @staticmethod
    def _partition(rules: Sequence[EvolutionRule]) -> Dict[RuleType, List[EvolutionRule]]:
        """Group rules by type; malformed rules abort the build."""
        partition: Dict[RuleType, List[EvolutionRule]] = {rule_type: [] for rule_type in RuleType}
        for rule in rules:
            expected = MetabolicRule if rule.rule_type == RuleType.METABOLIC else NonMetabolicRule
            if not isinstance(rule, expected):
                raise CatalogError(
                    f"{rule.rule_type.value} rule has wrong variant",
                    entity=rule.name or str(rule),
                    expected=expected.__name__,
                    observed=type(rule).__name__,
                )
            rule.validate_shape()
            partition[rule.rule_type].append(rule)
        return partition

    def _build_metabolic_index(self, rules: List[MetabolicRule]) -> Mapping[str, Tuple[MetabolicRule, ...]]:
        index = {
            protein_name: tuple(rule for rule in rules if rule.protein.name == protein_name)
            for protein_name in self.proteins
        }
        logger.debug(f"Metabolic index: {sum(map(len, index.values()))} entries for {len(index)} proteins")
        return MappingProxyType(index)

    def _build_creation_index(
        self,
        rules: List[NonMetabolicRule],
    ) -> Tuple[Mapping[Glue, RuleList], Tuple[int, ...]]:
        priorities = tuple(sorted({rule.priority for rule in rules}))
        index = {
            glue: tuple(
                rule for rule in rules
                if any(self.glue_relation.match_asymmetric(glue, connector.glue)
                       for connector in rule.product_tile.connectors)
            )
            for glue in self.glues.values()
        }
        logger.debug(f"Creation index: {len(index)} glues, priorities {priorities}")
        return MappingProxyType(index), priorities

    def _build_insertion_index(self, rules: List[NonMetabolicRule]) -> Mapping[GluePair, RuleList]:
        index: Dict[GluePair, RuleList] = {}
        for glue1, glue2 in combinations_with_replacement(self.glues.values(), 2):
            matching = tuple(rule for rule in rules if self.is_insertable(rule.product_tile, glue1, glue2))
            if matching:
                index[(glue1, glue2)] = matching
                index[(glue2, glue1)] = matching
        logger.debug(f"Insertion index: {len(index)} glue pairs")
        return MappingProxyType(index)

    def _build_division_index(self, rules: List[NonMetabolicRule]) -> Mapping[GluePair, RuleList]:
        index: Dict[GluePair, RuleList] = {}
        for glue1, glue2 in combinations_with_replacement(self.glues.values(), 2):
            matching = tuple(rule for rule in rules
                             if rule.divided_glues in ((glue1, glue2), (glue2, glue1)))
            if matching:
                index[(glue1, glue2)] = matching
                index[(glue2, glue1)] = matching
        logger.debug(f"Division index: {len(index)} glue pairs")
        return MappingProxyType(index)

    def _build_destruction_index(self, rules: List[NonMetabolicRule]) -> Mapping[str, RuleList]:
        index = {
            tile_name: tuple(rule for rule in rules if rule.target_tile.name == tile_name)
            for tile_name in self.tiles
        }
        logger.debug(f"Destruction index: {len(index)} tiles")
        return MappingProxyType(index)

    # ===== Lookups =====

    def metabolic_rules_for(self, protein_name: str) -> Tuple[MetabolicRule, ...]:
        return self.metabolic_rules.get(protein_name, ())

    def creation_rules_for(self, glue: Glue) -> RuleList:
        return self.creation_rules.get(glue, ())

    def insertion_rules_for(self, glue1: Glue, glue2: Glue) -> RuleList:
        return self.insertion_rules.get((glue1, glue2), ())

    def division_rules_for(self, glue1: Glue, glue2: Glue) -> RuleList:
        return self.division_rules.get((glue1, glue2), ())

    def destruction_rules_for(self, tile_name: str) -> RuleList:
        return self.destruction_rules.get(tile_name, ())

    @property
    def evolution_rules(self) -> Tuple[EvolutionRule, ...]:
        return self._evolution_rules

    # ===== Connector matching =====

    def matching_connectors(
        self,
        tile: AnyTile,
        glue1: Glue,
        glue2: Glue,
    ) -> Tuple[Optional[Connector], Optional[Connector]]:
        """
        Pair of connectors at distinct positions on ``tile`` which match
        ``glue1`` and ``glue2`` in the glue relation, or (None, None).

        Used for insertion of ``tile`` between existing connectors with
        ``glue1`` and ``glue2``.
        """
        shape = tile.vertices
        relation = self.glue_relation
        for connector1 in tile.connectors:
            if not (shape.contains_point(connector1.positions[0])
                    and relation.match_asymmetric(glue1, connector1.glue)):
                continue
            for connector2 in tile.connectors:
                if (not points_equal(connector1.positions[0], connector2.positions[0], self.tolerance)
                        and shape.contains_point(connector2.positions[0])
                        and relation.match_asymmetric(glue2, connector2.glue)):
                    return connector1, connector2
        return None, None

    def is_insertable(self, tile: AnyTile, glue1: Glue, glue2: Glue) -> bool:
        """
        Whether ``tile`` can be inserted between connectors with ``glue1``
        and ``glue2``. Only rods can be inserted; faces never are.
        """
        # TODO: support insertion of 2D tiles once the placement of the
        # inserted face between two edges is defined
        return tile.vertices.is_rod and self.matching_connectors(tile, glue1, glue2)[1] is not None

    def are_compatible(self, connector1: Connector, connector2: Connector) -> bool:
        """
        Whether two connectors can attach (glues, dimension, size).

        Order matters: the glue relation may be asymmetric. Single anchors
        mate if at least one owner is a rod; edge connectors mate if their
        spans have equal length.
        """
        if not self.glue_relation.match_asymmetric(connector1.glue, connector2.glue):
            return False
        if connector1.anchor_count == 1 and connector2.anchor_count == 1:
            return connector1.on_rod or connector2.on_rod
        if connector1.anchor_count == 2 and connector2.anchor_count == 2:
            return abs(connector1.length - connector2.length) <= self.tolerance
        return False

    def __str__(self) -> str:
        sections = [
            "Tile System:",
            "\n".join(str(tile) for tile in self.tiles.values()),
            "Seed tiles: " + " ".join(str(seed) for seed in self.seed_tiles),
            f"Glue relation:\n{self.glue_relation}",
            f"Glue radius: {self.glue_radius}",
            "M System:",
            "Floating objects:\n" + "\n".join(str(obj) for obj in self.floating_objects.values()),
            "Proteins:\n" + "\n".join(str(protein) for protein in self.proteins.values()),
            "Evolution rules:\n" + "\n".join(str(rule) for rule in self._evolution_rules),
        ]
        return "\n\n".join(sections) + "\n"

    def __repr__(self) -> str:
        return f"PSystem({len(self._evolution_rules)} rules, {len(self.tiles)} tiles, {len(self.glues)} glues)"
