"""Pure data types for cellrun.core.

These are simple dataclasses with no behavior coupling.
They can be passed to any front end as-is.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Marker(Enum):
    """Distinguished result values."""

    FAILED = "failed"  # Segment could not be evaluated

    def __repr__(self) -> str:
        return f"${self.value.capitalize()}"


FAILED = Marker.FAILED


@dataclass(frozen=True)
class SessionResult:
    """Everything one input block produced.

    Attributes:
        results: Per-segment results, in order, with None results dropped.
        result_positions: Execution index each surviving result belongs to.
        interactive: The block was exactly one interact(...) expression.
        diagnostics: Text written to the diagnostic channel during the block.
        consumed_indices: Execution indices used by the block.
    """

    results: list[Any] = field(default_factory=list)
    result_positions: list[int] = field(default_factory=list)
    interactive: bool = False
    diagnostics: str = ""
    consumed_indices: int = 0

    def outputs(self) -> list[tuple[int, Any]]:
        """Pair each result with its execution index."""
        return list(zip(self.result_positions, self.results))

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary. Values are not converted."""
        return {
            "results": list(self.results),
            "result_positions": list(self.result_positions),
            "interactive": self.interactive,
            "diagnostics": self.diagnostics,
            "consumed_indices": self.consumed_indices,
        }
