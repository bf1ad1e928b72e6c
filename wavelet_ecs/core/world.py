"""World: Entity-Component-System registry.

The World manages:
- Entity creation (integer ids)
- Component storage (type -> entity -> component mapping)
- Component queries (entities carrying a set of component types)
- The arena holding input signals, grids and reconstructions

Coefficient pyramids own a private arena, so they stay valid after the
world is cleared.

Example:
    >>> world = World()
    >>> eid = world.spawn_signal(np.sin(np.linspace(0, 6.28, 64)))
    >>> world.has_component(eid, Signal1D)
    True
    >>> world.clear()
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import numpy as np
from pydantic import BaseModel

from wavelet_ecs.core.arena import Arena

logger = logging.getLogger(__name__)

Component = BaseModel

T = TypeVar("T", bound=Component)

DEFAULT_ARENA_BYTES = 64 << 20


class World:
    """Central ECS registry managing entities, components, and memory.

    Attributes:
        arena: Memory arena for signal and grid tensors
        metadata: Per-entity metadata dict (input shapes, metric values)
    """

    def __init__(self, arena_bytes: int = DEFAULT_ARENA_BYTES):
        """Create World with specified arena size.

        Args:
            arena_bytes: Arena size in bytes (default 64 MB)
        """
        self.arena = Arena(size_bytes=arena_bytes)
        self._next_eid = 0
        self._components: dict[type[Component], dict[int, Component]] = {}
        self.metadata: dict[int, dict[str, Any]] = {}

    def new_entity(self) -> int:
        """Create a new entity and return its id."""
        eid = self._next_eid
        self._next_eid += 1
        self.metadata[eid] = {}
        return eid

    def spawn_signal(self, signal: Any) -> int:
        """Ingest a 1D real sequence.

        Args:
            signal: Array-like of shape (n,)

        Returns:
            Entity id with a Signal1D component attached

        Raises:
            ValueError: If the input is not one-dimensional or not real
        """
        from wavelet_ecs.components.signal import Signal1D

        data = _as_real(signal)
        if data.ndim != 1:
            raise ValueError(f"Expected 1D signal, got shape {data.shape}")

        eid = self.new_entity()
        self.add_component(eid, Signal1D(samples=self.arena.copy_tensor(data)))
        self.metadata[eid]["input_shape"] = data.shape
        return eid

    def spawn_image(self, image: Any) -> int:
        """Ingest a 2D real grid (grayscale image or matrix).

        Args:
            image: Array-like of shape (rows, cols)

        Returns:
            Entity id with an Image2D component attached

        Raises:
            ValueError: If the input is not two-dimensional or not real
        """
        from wavelet_ecs.components.image import Image2D

        data = _as_real(image)
        if data.ndim != 2:
            raise ValueError(f"Expected 2D grid with shape (rows, cols), got {data.shape}")

        eid = self.new_entity()
        self.add_component(eid, Image2D(pix=self.arena.copy_tensor(data)))
        self.metadata[eid]["input_shape"] = data.shape
        return eid

    def clear(self) -> None:
        """Reset arena and drop all entities/components.

        TensorRefs from the world arena become stale. Coefficient
        containers keep working because they own their storage.
        """
        self.arena.reset()
        self._next_eid = 0
        self._components.clear()
        self.metadata.clear()

    def add_component(self, eid: int, component: Component) -> None:
        """Attach a component to an entity, replacing one of the same type.

        Raises:
            ValueError: If entity does not exist
        """
        if eid not in self.metadata:
            raise ValueError(f"Entity {eid} does not exist")

        self._components.setdefault(type(component), {})[eid] = component

    def get_component(self, eid: int, comp_type: type[T]) -> T:
        """Retrieve a component from an entity.

        Raises:
            KeyError: If entity does not have the component
        """
        if comp_type not in self._components:
            raise KeyError(f"No entities have component type {comp_type.__name__}")
        if eid not in self._components[comp_type]:
            raise KeyError(f"Entity {eid} does not have component {comp_type.__name__}")

        return self._components[comp_type][eid]  # type: ignore

    def has_component(self, eid: int, comp_type: type[Component]) -> bool:
        """Check if entity has a specific component type."""
        return eid in self._components.get(comp_type, {})

    def remove_component(self, eid: int, comp_type: type[Component]) -> None:
        """Remove a component from an entity.

        Raises:
            KeyError: If entity does not have the component
        """
        if not self.has_component(eid, comp_type):
            raise KeyError(f"Entity {eid} does not have component {comp_type.__name__}")

        del self._components[comp_type][eid]

    def query(self, *comp_types: type[Component]) -> list[int]:
        """Entities that carry ALL of the given component types, sorted.

        With no arguments every entity is returned.
        """
        if not comp_types:
            return list(self.metadata.keys())

        result_set = set(self._components.get(comp_types[0], {}).keys())
        for comp_type in comp_types[1:]:
            result_set &= set(self._components.get(comp_type, {}).keys())

        return sorted(result_set)

    def destroy_entity(self, eid: int) -> None:
        """Remove entity and all its components.

        Arena memory is only reclaimed by clear().
        """
        if eid not in self.metadata:
            raise ValueError(f"Entity {eid} does not exist")

        for comp_store in self._components.values():
            comp_store.pop(eid, None)

        del self.metadata[eid]

    def pipe(self, entity: int) -> Any:
        """Start a fluent pipeline on an entity.

        Example:
            >>> coeff = (
            ...     world.pipe(entity)
            ...     .to(DWT2D(levels=3, wavelet='db2'))
            ...     .to(NormalShrink())
            ...     .out(DWT2DCoeff)
            ... )
        """
        from wavelet_ecs.core.pipeline import Pipe

        return Pipe(world=self, entity=entity)

    def __repr__(self) -> str:
        num_entities = len(self.metadata)
        num_comp_types = len(self._components)
        return (
            f"World(entities={num_entities}, component_types={num_comp_types}, "
            f"arena={self.arena})"
        )


def _as_real(data: Any) -> np.ndarray:
    arr = np.asarray(data)
    if not (np.issubdtype(arr.dtype, np.integer) or np.issubdtype(arr.dtype, np.floating)
            or arr.dtype == np.bool_):
        raise ValueError(f"Expected real numeric data, got dtype {arr.dtype}")
    return arr.astype(np.float64)
