"""Base class for pyceres cost functions in poseconstraints.

Subclasses provide the residual and its analytic jacobian; this class
handles weighting and the pyceres Evaluate protocol.
"""

import numpy as np
import pyceres


class BaseCostFunction(pyceres.CostFunction):
    """Abstract base class for weighted pyceres cost functions.

    Subclasses must implement:
    - _compute_residual(): Compute the residual vector
    - _compute_jacobians(): Fill the jacobian blocks
    - Set num_residuals and parameter_block_sizes in __init__
    """

    def __init__(self, *, weight: float = 1.0) -> None:
        """Initialize base cost function.

        Args:
            weight: Weight for this cost term
        """
        super().__init__()
        self.weight = weight

    def _compute_residual(self, parameters: list[np.ndarray]) -> np.ndarray:
        """Compute residual vector (unweighted).

        Args:
            parameters: List of parameter blocks

        Returns:
            Residual vector (will be weighted automatically)
        """
        raise NotImplementedError

    def _compute_jacobians(
        self,
        *,
        parameters: list[np.ndarray],
        jacobians: list[np.ndarray | None]
    ) -> None:
        """Fill unweighted jacobian blocks in row-major order.

        Args:
            parameters: List of parameter blocks
            jacobians: Jacobian blocks to fill (None entries are skipped)
        """
        raise NotImplementedError

    def Evaluate(
        self,
        parameters: list[np.ndarray],
        residuals: np.ndarray,
        jacobians: list[np.ndarray] | None
    ) -> bool:
        """Evaluate cost function (pyceres interface).

        Args:
            parameters: List of parameter blocks
            residuals: Output residual vector
            jacobians: Optional list of jacobian matrices

        Returns:
            True if evaluation succeeded
        """
        residual = self._compute_residual(parameters)
        if not np.all(np.isfinite(residual)):
            return False
        residuals[:] = self.weight * residual

        if jacobians is not None:
            self._compute_jacobians(parameters=parameters, jacobians=jacobians)
            for block in jacobians:
                if block is not None:
                    block[:] = self.weight * block
        return True
