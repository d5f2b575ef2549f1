"""Kernel functions evaluated between two sets of points, on any backend."""

from ..backend import get_backend
from ..exceptions import ConfigurationError
from ..validation import _get_string_dtype
from ..validation import check_array


def check_pairwise_arrays(X, Y, dtype=None):
    """Set X and Y appropriately and check inputs.

    If Y is None, it is set as a pointer to X (i.e. not a copy).
    Both arrays are converted to two-dimensional arrays of the current
    backend, with a common float dtype (float32 only if both are float32).

    Parameters
    ----------
    X : array of shape (n_samples_X, n_features)
    Y : array of shape (n_samples_Y, n_features), or None
    dtype : str or None
        Data type required for X and Y. If None, use float32 if both inputs
        are float32, else float64.

    Returns
    -------
    X : array of shape (n_samples_X, n_features)
    Y : array of shape (n_samples_Y, n_features)
        If Y was None, Y is a pointer to X.
    """
    if dtype is None:
        X_dtype = _get_string_dtype(X)
        Y_dtype = X_dtype if Y is None else _get_string_dtype(Y)
        dtype = "float32" if X_dtype == Y_dtype == "float32" else "float64"

    if Y is X or Y is None:
        X = Y = check_array(X, dtype=dtype)
    else:
        X = check_array(X, dtype=dtype)
        Y = check_array(Y, dtype=dtype)

    if X.shape[1] != Y.shape[1]:
        raise ValueError("Incompatible dimension for X and Y matrices: "
                         "X.shape[1] == %d while Y.shape[1] == %d" %
                         (X.shape[1], Y.shape[1]))
    return X, Y


def euclidean_distances(X, Y=None, squared=False):
    """Compute the distance matrix between each pair of rows of X and Y.

    The computation is done with the expansion
    ||x - y||^2 = ||x||^2 - 2 <x, y> + ||y||^2, negative values coming from
    rounding errors being clipped to zero.

    Parameters
    ----------
    X : array of shape (n_samples_X, n_features)
    Y : array of shape (n_samples_Y, n_features), or None
    squared : bool
        Whether to return squared distances.

    Returns
    -------
    distances : array of shape (n_samples_X, n_samples_Y)
    """
    backend = get_backend()
    X, Y = check_pairwise_arrays(X, Y)

    XX = backend.einsum('ij,ij->i', X, X)[:, None]
    YY = XX.T if X is Y else backend.einsum('ij,ij->i', Y, Y)[None, :]
    distances = XX - 2 * X @ Y.T + YY
    distances = backend.clip(distances, 0, None)

    if not squared:
        distances = backend.sqrt(distances)
    return distances


###############################################################################


def _exponential_kernel(X, Y, gamma, squared):
    """exp(-gamma * d(x, y)), with d the (squared) euclidean distance."""
    backend = get_backend()
    X, Y = check_pairwise_arrays(X, Y)
    if gamma is None:
        gamma = 1.0 / X.shape[1]
    return backend.exp(-gamma * euclidean_distances(X, Y, squared=squared))


def gaussian_kernel(X, Y=None, sigma=1.0):
    """
    Compute the Gaussian kernel between X and Y::

        K(x, y) = exp(-||x-y||^2 / (2 sigma^2))

    Parameters
    ----------
    X : array of shape (n_samples_X, n_features)
        Samples.
    Y : array of shape (n_samples_Y, n_features)
        Landmarks.
    sigma : float > 0
        Kernel bandwidth.

    Returns
    -------
    K : array of shape (n_samples_X, n_samples_Y)
        Computed kernel.
    """
    if sigma <= 0:
        raise ConfigurationError("sigma must be positive, got %r." % sigma)
    return rbf_kernel(X, Y, gamma=1. / (2 * sigma ** 2))


def rbf_kernel(X, Y=None, gamma=None):
    """
    Compute the rbf kernel between X and Y::

        K(x, y) = exp(-gamma ||x-y||^2)

    Parameters
    ----------
    X : array of shape (n_samples_X, n_features)
        Samples.
    Y : array of shape (n_samples_Y, n_features)
        Landmarks.
    gamma : float, default None
        If None, defaults to 1.0 / n_features

    Returns
    -------
    K : array of shape (n_samples_X, n_samples_Y)
        Computed kernel.
    """
    return _exponential_kernel(X, Y, gamma, squared=True)


def laplacian_kernel(X, Y=None, gamma=None):
    """Laplacian kernel between X and Y::

        K(x, y) = exp(-gamma ||x-y||_2)

    See ``rbf_kernel`` for the parameters.
    """
    return _exponential_kernel(X, Y, gamma, squared=False)


def linear_kernel(X, Y=None):
    """Linear kernel between X and Y, K(x, y) = <x, y>."""
    X, Y = check_pairwise_arrays(X, Y)
    return X @ Y.T


def polynomial_kernel(X, Y=None, degree=3, gamma=None, coef0=1):
    """
    Compute the polynomial kernel between X and Y::

        K(X, Y) = (gamma <X, Y> + coef0)^degree

    Parameters
    ----------
    X : array of shape (n_samples_X, n_features)
        Samples.
    Y : array of shape (n_samples_Y, n_features)
        Landmarks.
    degree : int, default 3
        Degree of the polynomial.
    gamma : float, default None
        if None, defaults to 1.0 / n_features
    coef0 : float, default 1
        Intercept.

    Returns
    -------
    K : array of shape (n_samples_X, n_samples_Y)
        Computed kernel.
    """
    X, Y = check_pairwise_arrays(X, Y)
    if gamma is None:
        gamma = 1.0 / X.shape[1]

    return (gamma * (X @ Y.T) + coef0) ** degree


PAIRWISE_KERNEL_FUNCTIONS = {
    'gaussian': gaussian_kernel,
    'rbf': rbf_kernel,
    'laplacian': laplacian_kernel,
    'linear': linear_kernel,
    'polynomial': polynomial_kernel,
    'poly': polynomial_kernel,
}


def pairwise_kernels(X, Y=None, metric="gaussian", **params):
    """Compute the kernel between arrays X and optional array Y.

    Parameters
    ----------
    X : array of shape (n_samples_X, n_features)
        Samples.
    Y : array of shape (n_samples_Y, n_features), or None
        Landmarks. If None, use X.
    metric : str, or callable
        Kernel name in PAIRWISE_KERNEL_FUNCTIONS, or a callable taking two
        arrays of points ``(X, Y, **params)`` and returning the kernel matrix
        of shape (n_samples_X, n_samples_Y).
    **params : optional keyword parameters
        Any further parameters are passed directly to the kernel function.

    Returns
    -------
    K : array of shape (n_samples_X, n_samples_Y)
        Computed kernel.
    """
    backend = get_backend()

    if callable(metric):
        if Y is None:
            Y = X
        K = backend.asarray(metric(X, Y, **params))
        if K.shape != (X.shape[0], Y.shape[0]):
            raise ValueError(
                "The kernel function returned an array of shape %s, expected"
                " %s." % (tuple(K.shape), (X.shape[0], Y.shape[0])))
        return K
    elif metric in PAIRWISE_KERNEL_FUNCTIONS:
        return PAIRWISE_KERNEL_FUNCTIONS[metric](X, Y, **params)
    else:
        raise ConfigurationError("Unknown kernel=%r." % (metric, ))
