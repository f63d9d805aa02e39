"""
Glues and the glue compatibility relation.

A glue is a symbolic label on a connector. The relation maps ordered glue
pairs to the floating objects released when the pair bonds. It is
directional: (a, b) in the relation says nothing about (b, a).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Iterator, Mapping, Optional, Set, Tuple
from types import MappingProxyType

from .objects import check_name


@dataclass(frozen=True, order=True)
class Glue:
    """Value-comparable glue label."""
    name: str

    def __post_init__(self):
        check_name(self.name, "Glue")

    def __str__(self) -> str:
        return self.name


GluePair = Tuple[Glue, Glue]


class GlueRelation:
    """
    Asymmetric compatibility relation between glues.

    Example:
        relation = GlueRelation({(Glue("a"), Glue("b")): {"water"}})
        relation.match_asymmetric(Glue("a"), Glue("b"))   # True
        relation.match_asymmetric(Glue("b"), Glue("a"))   # False
        relation.match(Glue("b"), Glue("a"))              # True
    """

    def __init__(self, pairs: Optional[Mapping[GluePair, Iterable[str]] | Iterable[GluePair]] = None):
        self._pairs: Dict[GluePair, FrozenSet[str]] = {}
        if pairs is None:
            return
        if isinstance(pairs, Mapping):
            for pair, released in pairs.items():
                self.add(pair[0], pair[1], released)
        else:
            for first, second in pairs:
                self.add(first, second)

    def add(self, first: Glue, second: Glue, released: Iterable[str] = ()) -> "GlueRelation":
        """Add the ordered pair (first, second)."""
        self._pairs[(first, second)] = frozenset(released)
        return self

    def __contains__(self, pair: object) -> bool:
        return pair in self._pairs

    def match_asymmetric(self, first: Glue, second: Glue) -> bool:
        """The ordered pair (first, second) is in the relation."""
        return (first, second) in self._pairs

    def match(self, first: Glue, second: Glue) -> bool:
        """The pair is in the relation in either order."""
        return (first, second) in self._pairs or (second, first) in self._pairs

    def get(self, first: Glue, second: Glue) -> Optional[FrozenSet[str]]:
        """Floating objects released by bonding the ordered pair, None if unrelated."""
        return self._pairs.get((first, second))

    def glues(self) -> Set[Glue]:
        """All glues appearing in the relation."""
        return {glue for pair in self._pairs for glue in pair}

    def as_mapping(self) -> Mapping[GluePair, FrozenSet[str]]:
        return MappingProxyType(self._pairs)

    def __iter__(self) -> Iterator[GluePair]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __str__(self) -> str:
        lines = []
        for (first, second), released in self._pairs.items():
            products = ", ".join(sorted(released)) if released else "-"
            lines.append(f"({first}, {second}): {products}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"GlueRelation({len(self._pairs)} pairs)"
