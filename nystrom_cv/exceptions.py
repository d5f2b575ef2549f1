"""Errors raised by the Nystrom cross-validation solvers.

All of them are fatal: the grid search is deterministic, so the caller is
expected to change the configuration and start again.
"""


class ConfigurationError(ValueError):
    """Invalid solver configuration, detected before any computation.

    For instance: no subsampling level given, validation fraction outside
    ]0, 1[, empty grid of regularization parameters.
    """


class DegenerateSplitError(ValueError):
    """The train/validation split leads to an empty training or validation
    set."""


class NumericalInstabilityError(RuntimeError):
    """A regularized Gram matrix lost positive-definiteness.

    Raised when the initial Cholesky factorization fails, or when a rank-one
    downdate of the Cholesky factor leads to a non-positive pivot. It means
    that the regularization parameter (or the kernel parameters) cannot be
    used with this dataset.
    """
