"""Sentinel values for the accumulator API.

``reduce()`` and ``pivot()`` must distinguish "no initial value supplied"
from "initial value is explicitly None". A plain ``None`` default cannot
do that, so the signatures default to ``MISSING`` instead.

Example usage:
    from foldline.contracts.sentinels import MISSING

    def reduce(self, reducer, initial_value=MISSING):
        if initial_value is MISSING:
            # Defer until the first datum arrives
            ...
"""

from typing import Final


class MissingSentinel:
    """Sentinel class marking an omitted optional argument.

    This is a singleton - use the MISSING instance, not the class directly.
    Comparison should always use `is` identity, never equality.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return "<MISSING>"

    def __bool__(self) -> bool:
        return False


MISSING: Final[MissingSentinel] = MissingSentinel()
"""Singleton sentinel indicating an argument was not supplied.

Use identity comparison: `if value is MISSING:`
"""
