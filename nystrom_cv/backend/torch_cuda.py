"""The "torch_cuda" GPU backend, based on PyTorch.

To use this backend, call ``nystrom_cv.backend.set_backend("torch_cuda")``.
"""

from .torch import *  # noqa
import torch

try:
    torch.arange(1).cuda()
except (AssertionError, RuntimeError) as error:
    import sys
    if "pytest" in sys.modules:  # if run through pytest
        import pytest
        pytest.skip("PyTorch not compiled with CUDA enabled.")
    raise AssertionError("PyTorch not compiled with CUDA enabled.") from error

from . import torch as _torch_cpu

###############################################################################

name = "torch_cuda"


def randn(*args, **kwargs):
    return torch.randn(*args, **kwargs).cuda()


def asarray(x, dtype=None, device="cuda"):
    """Convert to a tensor, on GPU unless another device is given."""
    if device is None and not isinstance(x, torch.Tensor):
        device = "cuda"
    return _torch_cpu.asarray(x, dtype=dtype, device=device)


def check_arrays(*all_inputs):
    """Convert all inputs into tensors on GPU, with the dtype of the first
    one. Inputs equal to None are kept as None.
    """
    first = asarray(all_inputs[0])
    return [first] + [
        None if tensor is None else asarray(tensor, dtype=first.dtype,
                                            device=first.device)
        for tensor in all_inputs[1:]
    ]
