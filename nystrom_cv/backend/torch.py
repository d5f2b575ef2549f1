"""The "torch" CPU backend, based on PyTorch.

To use this backend, call ``nystrom_cv.backend.set_backend("torch")``.
"""
try:
    import torch
except ImportError as error:
    import sys
    if "pytest" in sys.modules:  # if run through pytest
        import pytest
        pytest.skip("PyTorch not installed.")
    raise ImportError("PyTorch not installed.") from error

from ._utils import _dtype_to_str
from ._utils import _not_positive_definite

###############################################################################

name = "torch"
argmax = torch.argmax
randn = torch.randn
concatenate = torch.cat
sum = torch.sum
sqrt = torch.sqrt
any = torch.any
nan = torch.tensor(float("nan"))
inf = torch.tensor(float("inf"))
isnan = torch.isnan
isinf = torch.isinf
float32 = torch.float32
float64 = torch.float64
exp = torch.exp
arange = torch.arange
einsum = torch.einsum
sign = torch.sign
clip = torch.clamp


def to_numpy(array):
    try:
        return array.cpu().numpy()
    except AttributeError:
        return array


def to_cpu(array):
    return array.cpu()


def is_in_gpu(array):
    return array.device.type == "cuda"


def asarray(x, dtype=None, device="cpu"):
    if dtype is None:
        if isinstance(x, torch.Tensor):
            dtype = x.dtype
        if hasattr(x, "dtype") and hasattr(x.dtype, "name"):
            dtype = x.dtype.name
    if dtype is not None:
        dtype = _dtype_to_str(dtype)
        dtype = getattr(torch, dtype)
    if device is None and isinstance(x, torch.Tensor):
        device = x.device

    try:
        tensor = torch.as_tensor(x, dtype=dtype, device=device)
    except Exception:
        import numpy as np
        if torch.is_tensor(x) and x.device != "cpu":
            x = x.cpu()
        array = np.asarray(x, dtype=_dtype_to_str(dtype))
        tensor = torch.as_tensor(array, dtype=dtype, device=device)
    return tensor


def asarray_like(x, ref):
    return torch.as_tensor(x, dtype=ref.dtype, device=ref.device)


def copy(x):
    return x.clone()


def zeros_like(array, shape=None, dtype=None, device=None):
    """Add a shape parameter in zeros_like."""
    return full_like(array, 0, shape=shape, dtype=dtype, device=device)


def full_like(array, fill_value, shape=None, dtype=None, device=None):
    """Add a shape parameter in full_like."""
    if shape is None:
        shape = array.shape
    if isinstance(shape, int):
        shape = (shape, )
    if isinstance(dtype, str):
        dtype = getattr(torch, dtype)
    if dtype is None:
        dtype = array.dtype
    if device is None:
        device = array.device
    return torch.full(shape, fill_value, dtype=dtype, device=device,
                      layout=array.layout)


def check_arrays(*all_inputs):
    """Convert all inputs into tensors, with the dtype and device of the first
    one. Inputs equal to None are kept as None.
    """
    first = asarray(all_inputs[0])
    return [first] + [
        None if tensor is None else asarray(tensor, dtype=first.dtype,
                                            device=first.device)
        for tensor in all_inputs[1:]
    ]


def cholesky(M):
    """Upper triangular Cholesky factor R, such that R.T @ R == M."""
    R, info = torch.linalg.cholesky_ex(M, upper=True)
    if info.item() != 0 or torch.any(torch.isnan(R)):
        raise _not_positive_definite(M.shape)
    return R


def solve_triangular(R, B, trans=False):
    """Solve R @ X = B, or R.T @ X = B if trans, with R upper triangular."""
    if trans:
        return torch.linalg.solve_triangular(R.T, B, upper=False)
    return torch.linalg.solve_triangular(R, B, upper=True)
