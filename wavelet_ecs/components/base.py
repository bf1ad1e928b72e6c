"""Component base class."""

from pydantic import BaseModel


class Component(BaseModel):
    """Base class for all ECS components.

    Components are pydantic data containers. Tensor data is held as
    TensorRef handles pointing into an arena.
    """

    model_config = {"arbitrary_types_allowed": True}
