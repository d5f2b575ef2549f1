"""The "cupy" GPU backend, based on CuPy.

To use this backend, call ``nystrom_cv.backend.set_backend("cupy")``.
"""
try:
    import cupy
    import cupyx.scipy.linalg
    import numpy
except ImportError as error:
    import sys
    if "pytest" in sys.modules:  # if run through pytest
        import pytest
        pytest.skip("Cupy not installed.")
    raise ImportError("Cupy not installed.") from error

from ._utils import _not_positive_definite

###############################################################################

name = "cupy"
argmax = cupy.argmax
randn = cupy.random.randn
concatenate = cupy.concatenate
sum = cupy.sum
sqrt = cupy.sqrt
any = cupy.any
nan = cupy.nan
inf = cupy.inf
isnan = cupy.isnan
isinf = cupy.isinf
copy = cupy.copy
float32 = cupy.float32
float64 = cupy.float64
exp = cupy.exp
arange = cupy.arange
einsum = cupy.einsum
sign = cupy.sign
clip = cupy.clip


def to_numpy(array):
    return cupy.asnumpy(array)


def to_cpu(array):
    return cupy.asnumpy(array)


def is_in_gpu(array):
    return isinstance(array, cupy.ndarray)


def zeros_like(array, shape=None, dtype=None, device=None):
    """Add a shape parameter in zeros_like."""
    return full_like(array, 0, shape=shape, dtype=dtype, device=device)


def full_like(array, fill_value, shape=None, dtype=None, device=None):
    """Add a shape parameter in full_like."""
    xp = cupy.get_array_module(array)
    if shape is None:
        shape = array.shape
    if dtype is None:
        dtype = array.dtype
    return xp.full(shape, fill_value, dtype=dtype)


def asarray(a, dtype=None):
    return cupy.asarray(a, dtype=dtype)


def asarray_like(x, ref):
    xp = cupy.get_array_module(ref)
    return xp.asarray(x, dtype=ref.dtype)


def check_arrays(*all_inputs):
    """Convert all inputs into cupy arrays, with the dtype of the first one.
    Inputs equal to None are kept as None.
    """
    first = asarray(all_inputs[0])
    return [first] + [
        None if array is None else asarray(array, dtype=first.dtype)
        for array in all_inputs[1:]
    ]


def cholesky(M):
    """Upper triangular Cholesky factor R, such that R.T @ R == M."""
    # cupy does not always raise on indefinite matrices, but returns nans
    try:
        L = cupy.linalg.cholesky(M)
    except numpy.linalg.LinAlgError as error:
        raise _not_positive_definite(M.shape, error) from error
    if cupy.any(cupy.isnan(L)):
        raise _not_positive_definite(M.shape)
    return L.T


def solve_triangular(R, B, trans=False):
    """Solve R @ X = B, or R.T @ X = B if trans, with R upper triangular."""
    return cupyx.scipy.linalg.solve_triangular(R, B,
                                               trans="T" if trans else "N",
                                               lower=False)
