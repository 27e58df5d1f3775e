"""Stage protocols and the accumulator's pending-stage slot.

A stage is the runtime behavior of one transform: it accepts data one
datum at a time (append) and produces its current output set (resolve).
The accumulator holds exactly one slot describing how the next datum is
handled:

- Active(stage): the stage is built, data goes to stage.append().
- Deferred(install, resolve): the stage cannot be built until it has seen
  one datum. install(first_datum) builds the stage, which then becomes
  Active. resolve() answers for a stage that never received data.

Stages report failures through an ErrorCallback supplied by the owning
accumulator. The callback either raises (raise mode) or records the error
(capture mode).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol

from foldline.contracts.enums import StageKind
from foldline.contracts.errors import AccumulatorError

type ErrorCallback = Callable[[AccumulatorError], None]


class Stage[In, Out](Protocol):
    """Synchronous stage: accept-datum and produce-output capabilities."""

    kind: StageKind

    def append(self, datum: In) -> None:
        """Feed one datum into the stage."""
        ...

    def resolve(self) -> list[Out]:
        """Return the stage's current output set."""
        ...


class AsyncStage[In, Out](Protocol):
    """Asynchronous stage. Callbacks inside it may suspend."""

    kind: StageKind

    async def append(self, datum: In) -> None:
        """Feed one datum into the stage."""
        ...

    async def resolve(self) -> list[Out]:
        """Return the stage's current output set."""
        ...


@dataclass(frozen=True, slots=True)
class Active[S]:
    """A built stage handling every datum."""

    stage: S

    @property
    def kind(self) -> StageKind:
        kind: StageKind = self.stage.kind  # type: ignore[attr-defined]
        return kind


@dataclass(frozen=True, slots=True)
class Deferred[S, R]:
    """A stage waiting for its first datum.

    Attributes:
        kind: Kind of the stage that will be installed
        install: Builds the stage from the first datum (which it consumes)
        resolve: Output when no datum ever arrived
    """

    kind: StageKind
    install: Callable[[Any], S]
    resolve: Callable[[], R]


type StageSlot[In, Out] = Active[Stage[In, Out]] | Deferred[Stage[In, Out], list[Out]]
type AsyncStageSlot[In, Out] = Active[AsyncStage[In, Out]] | Deferred[AsyncStage[In, Out], Awaitable[list[Out]]]
