"""1D signal components: Signal1D, ReconSignal1D."""

from wavelet_ecs.components.base import Component
from wavelet_ecs.core.arena import TensorRef


class Signal1D(Component):
    """Original 1D real sequence.

    Attributes:
        samples: TensorRef to samples (n,) float64
    """

    samples: TensorRef


class ReconSignal1D(Component):
    """Sequence rebuilt by the inverse transform.

    Attributes:
        samples: TensorRef to samples (n,) float64
    """

    samples: TensorRef
