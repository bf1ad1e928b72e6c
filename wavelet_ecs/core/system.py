"""System base class for ECS transformations.

Systems hold the transform logic. Each one declares the component types
it reads and the ones it attaches, and runs over a list of entity ids.

Transforms come in two directions:
- 'forward': data -> coefficients (decomposition, analysis)
- 'inverse': coefficients -> data (reconstruction, synthesis)

Systems that only edit or measure (thresholding, metrics) run in
'forward' mode and may produce no new component.

Example:
    >>> class Negate(System):
    ...     def required_components(self):
    ...         return [Signal1D]
    ...     def produced_components(self):
    ...         return [ReconSignal1D]
    ...     def run(self, world, eids):
    ...         for eid in eids:
    ...             samples = world.arena.view(world.get_component(eid, Signal1D).samples)
    ...             ref = world.arena.copy_tensor(-samples)
    ...             world.add_component(eid, ReconSignal1D(samples=ref))
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Literal

from wavelet_ecs.core.world import World

Mode = Literal["forward", "inverse"]


class System(ABC):
    """Base class for all ECS systems.

    Attributes:
        mode: Transformation direction ('forward' or 'inverse')
    """

    def __init__(self, mode: Mode = "forward") -> None:
        if mode not in ("forward", "inverse"):
            raise ValueError(f"mode must be 'forward' or 'inverse', got {mode!r}")
        self.mode = mode

    @property
    def is_forward(self) -> bool:
        return self.mode == "forward"

    @abstractmethod
    def required_components(self) -> list[type]:
        """Component types an entity must carry for this system to run."""

    @abstractmethod
    def produced_components(self) -> list[type]:
        """Component types this system attaches to each processed entity."""

    @abstractmethod
    def run(self, world: World, eids: list[int]) -> None:
        """Execute the system on the given entities.

        Args:
            world: World instance with entities and components
            eids: Entity ids that passed can_run()
        """

    def can_run(self, world: World, eid: int) -> bool:
        """Check if entity has all required components."""
        return all(world.has_component(eid, ct) for ct in self.required_components())

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(mode={self.mode})"
