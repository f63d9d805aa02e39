"""
Core module of the M-system.

Contains:
- Glue, GlueRelation: connector labels and their asymmetric compatibility
- FloatingObject, Protein: named catalog objects
- Connector, Tile, SeedTile, TileInSpace: tile types and placed tiles
- EvolutionRule, MetabolicRule, NonMetabolicRule: rewriting rules
- Catalog: deserialized M system handed over by a loader
- PSystem: read-only rule index with connector matching
"""

from .objects import CatalogError, FloatingObject, Protein
from .glue import Glue, GluePair, GlueRelation
from .tile import Connector, ConnectorHandle, SeedTile, Tile, TileInSpace, TileState
from .rules import EvolutionRule, MetabolicRule, MetabolicSubtype, NonMetabolicRule, RuleType
from .catalog import Catalog
from .psystem import PSystem

__all__ = [
    "CatalogError",
    "FloatingObject",
    "Protein",
    "Glue",
    "GluePair",
    "GlueRelation",
    "Connector",
    "ConnectorHandle",
    "SeedTile",
    "Tile",
    "TileInSpace",
    "TileState",
    "EvolutionRule",
    "MetabolicRule",
    "MetabolicSubtype",
    "NonMetabolicRule",
    "RuleType",
    "Catalog",
    "PSystem",
]
