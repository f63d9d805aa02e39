"""
Named catalog objects: floating objects and proteins.

The loader hands these over already parsed; only the shape constraints
needed by the core are checked here.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional


class CatalogError(ValueError):
    """
    Raised when a catalog entity cannot be accepted.

    Carries the offending entity name and, for shape errors, the expected
    and observed shape so that the bad input can be located.
    """

    def __init__(
        self,
        message: str,
        entity: Optional[str] = None,
        expected: Any = None,
        observed: Any = None,
    ):
        self.entity = entity
        self.expected = expected
        self.observed = observed
        parts = [message]
        if entity is not None:
            parts.insert(0, f"{entity}:")
        if expected is not None or observed is not None:
            parts.append(f"(expected {expected}, got {observed})")
        super().__init__(" ".join(parts))


def check_name(name: Optional[str], kind: str) -> None:
    """Reject missing or empty names of named entities."""
    if name is None:
        raise CatalogError(f"{kind} name cannot be None")
    if not isinstance(name, str) or name == "":
        raise CatalogError(f"{kind} name cannot be empty", expected="non-empty string", observed=repr(name))


@dataclass(frozen=True)
class FloatingObject:
    """
    Object floating in the environment, consumed and produced by rules.

    Attributes:
        name: Catalog name
        mobility: Maximal distance travelled in one step
        concentration: Initial concentration in the environment
    """
    name: str
    mobility: float = 0.0
    concentration: float = 0.0

    def __post_init__(self):
        check_name(self.name, "Floating object")
        if self.mobility < 0:
            raise CatalogError("mobility must be non-negative", entity=self.name,
                               expected=">= 0", observed=self.mobility)

    def __str__(self) -> str:
        return f"{self.name} (mobility {self.mobility}, concentration {self.concentration})"


@dataclass(frozen=True)
class Protein:
    """Protein placed on tiles; drives metabolic rules."""
    name: str

    def __post_init__(self):
        check_name(self.name, "Protein")

    def __str__(self) -> str:
        return self.name
