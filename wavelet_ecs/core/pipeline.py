"""Fluent pipeline over a world entity.

A Pipe collects systems with `.to()` (or `|`) and runs them in order
when `.execute()` or `.out()` is called. Every system must find its
required components on the entity, otherwise the pipeline stops with
a RuntimeError naming the missing types.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel

if TYPE_CHECKING:
    from wavelet_ecs.core.system import System
    from wavelet_ecs.core.world import World

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class Pipe:
    """Fluent pipeline builder bound to one entity.

    Example:
        >>> world = World()
        >>> entity = world.spawn_image(img)
        >>> denoised = (
        ...     world.pipe(entity)
        ...     .to(DWT2D(levels=2, wavelet='db4'))
        ...     .to(NormalShrink())
        ...     .to(DWT2D(mode='inverse'))
        ...     .out(ReconImage2D)
        ... )
    """

    def __init__(self, world: "World", entity: int) -> None:
        self.world: Any = world
        self.entities = [entity]
        self.systems: list[Any] = []

    def to(self, system: "System") -> "Pipe":
        """Append a system; returns self for chaining."""
        self.systems.append(system)
        return self

    def __or__(self, system: "System") -> "Pipe":
        """`pipe | system` is `pipe.to(system)`."""
        return self.to(system)

    def out(self, component_type: type[T]) -> T:
        """Run the pipeline and return the requested component.

        Raises:
            RuntimeError: If a system cannot run (missing components)
            KeyError: If the entity lacks the requested component afterwards
        """
        self.execute()
        return self.world.get_component(self.entities[0], component_type)  # type: ignore[no-any-return]

    def execute(self) -> None:
        """Run all systems in order.

        Raises:
            RuntimeError: If no entity carries a system's required components
        """
        for system in self.systems:
            runnable = [eid for eid in self.entities if system.can_run(self.world, eid)]

            if not runnable:
                required = [ct.__name__ for ct in system.required_components()]
                raise RuntimeError(
                    f"System {type(system).__name__} cannot run: "
                    f"entities missing required components {required}. "
                    f"Available entities: {self.entities}"
                )

            logger.debug("Running %r on entities %s", system, runnable)
            system.run(self.world, runnable)

    def __repr__(self) -> str:
        chain = " | ".join(repr(s) for s in self.systems) or "<empty>"
        return f"Pipe(entities={self.entities}, systems={chain})"
