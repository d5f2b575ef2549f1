"""The "numpy" CPU backend, the default one."""
import numpy as np
import scipy.linalg as linalg

from ._utils import _not_positive_definite

###############################################################################

name = "numpy"
argmax = np.argmax
randn = np.random.randn
concatenate = np.concatenate
sum = np.sum
sqrt = np.sqrt
any = np.any
nan = np.nan
inf = np.inf
isnan = np.isnan
isinf = np.isinf
copy = np.copy
float32 = np.float32
float64 = np.float64
asarray = np.asarray
exp = np.exp
arange = np.arange
einsum = np.einsum
clip = np.clip
sign = np.sign


def to_numpy(array):
    return array


def to_cpu(array):
    return array


def is_in_gpu(array):
    return False


def zeros_like(array, shape=None, dtype=None, device=None):
    """Add a shape parameter in zeros_like."""
    return full_like(array, 0, shape=shape, dtype=dtype, device=device)


def full_like(array, fill_value, shape=None, dtype=None, device=None):
    """Add a shape parameter in full_like."""
    if shape is None:
        shape = array.shape
    if dtype is None:
        dtype = array.dtype
    return np.full(shape, fill_value, dtype=dtype)


def asarray_like(x, ref):
    return np.asarray(x, dtype=ref.dtype)


def check_arrays(*all_inputs):
    """Convert all inputs into arrays, with the dtype of the first one.
    Inputs equal to None are kept as None.
    """
    first = np.asarray(all_inputs[0])
    return [first] + [
        None if array is None else np.asarray(array, dtype=first.dtype)
        for array in all_inputs[1:]
    ]


def cholesky(M):
    """Upper triangular Cholesky factor R, such that R.T @ R == M."""
    try:
        return linalg.cholesky(M, lower=False)
    except linalg.LinAlgError as error:
        raise _not_positive_definite(M.shape, error) from error


def solve_triangular(R, B, trans=False):
    """Solve R @ X = B, or R.T @ X = B if trans, with R upper triangular."""
    return linalg.solve_triangular(R, B, trans="T" if trans else "N",
                                   lower=False)
