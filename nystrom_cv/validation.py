import numbers
import warnings

import numpy as np
from numpy.exceptions import ComplexWarning

from .backend import get_backend
from .backend._utils import _dtype_to_str


def check_random_state(seed):
    """Turn seed into a np.random.RandomState instance

    Parameters
    ----------
    seed : None | int | instance of RandomState
        If seed is None, return the RandomState singleton used by np.random.
        If seed is an int, return a new RandomState instance seeded with seed.
        If seed is already a RandomState instance, return it.
        Otherwise raise ValueError.
    """
    if seed is None or seed is np.random:
        return np.random.mtrand._rand
    if isinstance(seed, numbers.Integral):
        return np.random.RandomState(seed)
    if isinstance(seed, np.random.RandomState):
        return seed
    raise ValueError('%r cannot be used to seed a numpy.random.RandomState'
                     ' instance' % seed)


def check_array(array, dtype=["float64", "float32"], copy=False,
                force_all_finite=True, ndim=2, ensure_min_samples=1,
                ensure_min_features=1):
    """Input validation on an array, list, or similar.

    By default, the input is checked to be a non-empty 2D array containing
    only finite values, and is converted to the current backend.

    Parameters
    ----------
    array : object
        Input object to check / convert.
    dtype : str, list of str or None
        Data type of result. If None, the dtype of the input is preserved.
        If dtype is a list of str, conversion on the first type is only
        performed if the dtype of the input is not in the list.
    copy : boolean (default=False)
        Whether a forced copy will be triggered.
    force_all_finite : boolean (default=True)
        Whether to raise an error on inf and nan in array.
    ndim : int, list of int, or None (default=2)
        If not None, list the accepted number of dimensions of the array.
    ensure_min_samples : int (default=1)
        Make sure that the array has a minimum number of samples in its first
        axis. Setting to 0 disables this check.
    ensure_min_features : int (default=1)
        Make sure that the 2D array has some minimum number of features
        (columns). Setting to 0 disables this check.

    Returns
    -------
    array_converted : object
        The converted and validated array.
    """
    backend = get_backend()

    dtype_input = _get_string_dtype(array)
    if isinstance(dtype, (list, tuple)):
        dtype = dtype_input if dtype_input in dtype else dtype[0]
    elif dtype is not None and dtype not in ("float32", "float64"):
        raise ValueError("Unknown dtype=%r" % (dtype, ))

    # convert ComplexWarning into error
    with warnings.catch_warnings():
        try:
            warnings.simplefilter('error', ComplexWarning)
            array = backend.asarray(array, dtype=dtype)
        except ComplexWarning:
            raise ValueError("Complex data not supported")

    if copy:
        array = backend.copy(array)

    if ndim is not None and array.ndim not in np.atleast_1d(ndim):
        raise ValueError("Found array with ndim %d, expected %s. "
                         "Reshape your data or change the input." %
                         (array.ndim, ndim))

    if force_all_finite:
        _assert_all_finite(array)

    if ensure_min_samples > 0 and array.shape[0] < ensure_min_samples:
        raise ValueError(
            "Found array with %d sample(s) (shape=%s) while a minimum of %d "
            "is required." % (array.shape[0], tuple(array.shape),
                              ensure_min_samples))

    if (ensure_min_features > 0 and array.ndim == 2
            and array.shape[1] < ensure_min_features):
        raise ValueError(
            "Found array with %d feature(s) (shape=%s) while a minimum of %d "
            "is required." % (array.shape[1], tuple(array.shape),
                              ensure_min_features))

    return array


def _assert_all_finite(X):
    """Raise a ValueError if X contains NaN or infinity."""
    backend = get_backend()
    if backend.any(backend.isnan(X)) or backend.any(backend.isinf(X)):
        raise ValueError("Input contains NaN, infinity or a value too large "
                         "for dtype(%r)." % _get_string_dtype(X))


def _get_string_dtype(array):
    """Get array's dtype, as a string.
    Returns None, if array has no attribute dtype.
    """
    dtype = getattr(array, "dtype", None)
    if dtype is None:
        return None

    return _dtype_to_str(dtype)
