"""Tests for World and entity management."""

import numpy as np
import pytest

from wavelet_ecs.components.base import Component
from wavelet_ecs.components.image import Image2D
from wavelet_ecs.components.signal import Signal1D
from wavelet_ecs.core.world import World
from wavelet_ecs.systems.dwt1d import decompose


# Mock component for testing
class MockComponent(Component):
    """Mock component for testing."""

    value: int


class OtherComponent(Component):
    """Second mock component."""

    name: str


class TestWorld:
    """Tests for World ECS manager."""

    def test_creation(self) -> None:
        """Test World creation."""
        world = World(arena_bytes=1024)
        assert world.arena.size == 1024
        assert len(world.metadata) == 0

    def test_new_entity(self) -> None:
        """Entity ids are sequential and get a metadata dict."""
        world = World()
        eid1 = world.new_entity()
        eid2 = world.new_entity()

        assert eid1 == 0
        assert eid2 == 1
        assert world.metadata[eid1] == {}

    def test_add_and_get_component(self) -> None:
        """Test adding and retrieving a component."""
        world = World()
        eid = world.new_entity()
        world.add_component(eid, MockComponent(value=42))

        assert world.has_component(eid, MockComponent)
        assert world.get_component(eid, MockComponent).value == 42

    def test_add_component_nonexistent_entity(self) -> None:
        """Test adding component to non-existent entity raises error."""
        world = World()
        with pytest.raises(ValueError, match="Entity .* does not exist"):
            world.add_component(999, MockComponent(value=42))

    def test_add_component_replaces(self) -> None:
        """A second component of the same type replaces the first."""
        world = World()
        eid = world.new_entity()
        world.add_component(eid, MockComponent(value=1))
        world.add_component(eid, MockComponent(value=2))
        assert world.get_component(eid, MockComponent).value == 2

    def test_get_component_not_present(self) -> None:
        """Test retrieving non-existent component raises KeyError."""
        world = World()
        eid = world.new_entity()
        with pytest.raises(KeyError, match="(does not have component|No entities have component)"):
            world.get_component(eid, MockComponent)

    def test_remove_component(self) -> None:
        """Test removing a component."""
        world = World()
        eid = world.new_entity()
        world.add_component(eid, MockComponent(value=1))
        world.remove_component(eid, MockComponent)
        assert not world.has_component(eid, MockComponent)

        with pytest.raises(KeyError):
            world.remove_component(eid, MockComponent)

    def test_query(self) -> None:
        """query() returns entities carrying all requested types."""
        world = World()
        e1 = world.new_entity()
        e2 = world.new_entity()
        e3 = world.new_entity()
        world.add_component(e1, MockComponent(value=1))
        world.add_component(e2, MockComponent(value=2))
        world.add_component(e2, OtherComponent(name="b"))

        assert world.query(MockComponent) == [e1, e2]
        assert world.query(MockComponent, OtherComponent) == [e2]
        assert world.query() == [e1, e2, e3]

    def test_destroy_entity(self) -> None:
        """Destroying an entity removes all its components."""
        world = World()
        eid = world.new_entity()
        world.add_component(eid, MockComponent(value=1))
        world.destroy_entity(eid)

        assert not world.has_component(eid, MockComponent)
        assert eid not in world.metadata
        with pytest.raises(ValueError):
            world.destroy_entity(eid)

    def test_spawn_signal(self) -> None:
        """spawn_signal stores a float64 copy of the samples."""
        world = World()
        data = np.array([1, 2, 3, 4])
        eid = world.spawn_signal(data)

        signal = world.get_component(eid, Signal1D)
        stored = world.arena.view(signal.samples)
        assert stored.dtype == np.float64
        np.testing.assert_array_equal(stored, data)
        assert world.metadata[eid]["input_shape"] == (4,)

    def test_spawn_signal_wrong_rank(self) -> None:
        """spawn_signal rejects 2D input."""
        world = World()
        with pytest.raises(ValueError, match="Expected 1D signal"):
            world.spawn_signal(np.zeros((2, 2)))

    def test_spawn_image(self) -> None:
        """spawn_image stores the grid as float64 and records only its shape."""
        world = World()
        img = np.arange(12, dtype=np.uint8).reshape(3, 4)
        eid = world.spawn_image(img)

        stored = world.arena.view(world.get_component(eid, Image2D).pix)
        np.testing.assert_array_equal(stored, img)
        assert world.metadata[eid]["input_shape"] == (3, 4)
        assert stored.dtype == np.float64
        assert set(world.metadata[eid]) == {"input_shape"}

    def test_spawn_image_rejects_complex(self) -> None:
        """Non-real data is rejected."""
        world = World()
        with pytest.raises(ValueError, match="real numeric"):
            world.spawn_image(np.ones((2, 2), dtype=np.complex128))

    def test_clear(self) -> None:
        """clear() drops entities and invalidates world refs."""
        world = World()
        eid = world.spawn_signal(np.arange(8.0))
        ref = world.get_component(eid, Signal1D).samples
        world.clear()

        assert len(world.metadata) == 0
        assert world.new_entity() == 0
        with pytest.raises(ValueError, match="Stale"):
            world.arena.view(ref)

    def test_pyramid_survives_clear(self) -> None:
        """Coefficient pyramids own their storage."""
        world = World()
        eid = world.new_entity()
        coeff = decompose(np.arange(8.0), levels=2, wavelet="haar")
        world.add_component(eid, coeff)
        world.clear()

        assert coeff.access_approximate(2).shape == (2,)

    def test_repr(self) -> None:
        """Test string representation."""
        world = World()
        world.new_entity()
        assert "entities=1" in repr(world)
