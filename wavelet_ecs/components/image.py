"""2D grid components: Image2D, ReconImage2D."""

from wavelet_ecs.components.base import Component
from wavelet_ecs.core.arena import TensorRef


class Image2D(Component):
    """Original 2D real grid (grayscale image or matrix).

    Attributes:
        pix: TensorRef to grid data (rows, cols) float64
    """

    pix: TensorRef


class ReconImage2D(Component):
    """Grid rebuilt by the inverse transform.

    Attributes:
        pix: TensorRef to grid data (rows, cols) float64
    """

    pix: TensorRef
