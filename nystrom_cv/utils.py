import numpy as np

from .backend import get_backend
from .validation import check_random_state


def assert_array_almost_equal(x, y, decimal=6, err_msg='', verbose=True):
    """Test array equality, casting all arrays to numpy."""
    backend = get_backend()
    x = backend.to_numpy(x)
    y = backend.to_numpy(y)
    return np.testing.assert_array_almost_equal(x, y, decimal=decimal,
                                                err_msg=err_msg,
                                                verbose=verbose)


def generate_nonlinear_dataset(n_samples=100, n_features=2, n_targets=1,
                               noise=0.1, classification=False,
                               random_state=None):
    """Utility to generate datasets for the tests and the gallery.

    The targets are a smooth nonlinear function of the inputs::

        Y = sin(pi * X @ W) + noise

    Parameters
    ----------
    n_samples : int
        Number of samples.
    n_features : int
        Number of input features.
    n_targets : int
        Number of targets (output signals).
    noise : float >= 0
        Scale of the Gaussian white noise added to the targets.
    classification : bool
        If True, the targets are replaced by +1/-1 labels. With more than one
        target, a one-vs-all coding of the largest output is used.
    random_state : int, or None
        Random generator seed.

    Returns
    -------
    X : array of shape (n_samples, n_features)
        Input samples, uniform in [-1, 1].
    Y : array of shape (n_samples, n_targets)
        Targets.
    """
    backend = get_backend()
    rng = check_random_state(random_state)

    X = rng.uniform(-1, 1, size=(n_samples, n_features))
    weights = rng.randn(n_features, n_targets) / np.sqrt(n_features)
    Y = np.sin(np.pi * X @ weights)
    Y += rng.randn(n_samples, n_targets) * noise

    if classification:
        if n_targets == 1:
            Y = np.where(Y >= 0, 1., -1.)
        else:
            labels = -np.ones_like(Y)
            labels[np.arange(n_samples), np.argmax(Y, 1)] = 1
            Y = labels

    X = backend.asarray(X, dtype="float64")
    Y = backend.asarray(Y, dtype="float64")
    return X, Y
