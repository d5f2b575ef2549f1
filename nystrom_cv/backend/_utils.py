import types
import importlib
import warnings
from functools import wraps

ALL_BACKENDS = [
    "numpy",
    "cupy",
    "torch",
    "torch_cuda",
]

CURRENT_BACKEND = "numpy"

MATCHING_CPU_BACKEND = {
    "numpy": "numpy",
    "cupy": "numpy",
    "torch": "torch",
    "torch_cuda": "torch",
}


def set_backend(backend, on_error="raise"):
    """Set the backend using a global variable, and return the backend module.

    Parameters
    ----------
    backend : str or module
        Name or module of the backend, in ALL_BACKENDS.
    on_error : str in {"raise", "warn"}
        If "raise", errors raised while loading the backend are propagated.
        If "warn", they are turned into a warning, and the current backend is
        kept.

    Returns
    -------
    module : python module
        Module of the backend.
    """
    global CURRENT_BACKEND
    if on_error not in ("raise", "warn"):
        raise ValueError('Unknown value on_error=%r' % (on_error, ))

    try:
        if isinstance(backend, types.ModuleType):
            backend = backend.name
        if backend not in ALL_BACKENDS:
            raise ValueError("Unknown backend=%r" % (backend, ))
        module = importlib.import_module(__package__ + "." + backend)
    except Exception as error:
        if on_error == "raise":
            raise
        warnings.warn("Setting backend to %r failed: %s. Keeping the %s "
                      "backend." % (backend, error, CURRENT_BACKEND))
        return get_backend()

    CURRENT_BACKEND = backend
    return module


def get_backend():
    """Get the current backend module.

    Returns
    -------
    module : python module
        Module of the backend.
    """
    return importlib.import_module(__package__ + "." + CURRENT_BACKEND)


def _dtype_to_str(dtype):
    """Cast dtype to string, such as "float32", or "float64"."""
    if dtype is None or isinstance(dtype, str):
        return dtype
    if hasattr(dtype, "name"):  # numpy and cupy
        return dtype.name
    if str(dtype).startswith("torch."):
        return str(dtype)[len("torch."):]
    raise NotImplementedError("Unknown dtype %r." % (dtype, ))


def force_cpu_backend(func):
    """Decorator switching to the matching CPU backend during a method call,
    if the object has ``force_cpu=True``."""

    @wraps(func)
    def wrapper(self, *args, **kwargs):
        if not getattr(self, "force_cpu", False):
            return func(self, *args, **kwargs)

        original_backend = get_backend().name
        set_backend(MATCHING_CPU_BACKEND[original_backend])
        try:
            return func(self, *args, **kwargs)
        finally:
            set_backend(original_backend)

    return wrapper


def _not_positive_definite(shape, error=None):
    """Build the error raised when a Cholesky factorization fails."""
    from ..exceptions import NumericalInstabilityError
    msg = ("Matrix of shape %s is not positive-definite, the Cholesky "
           "factorization failed." % (tuple(shape), ))
    if error is not None:
        msg += "\nOriginal error:\n%s: %s" % (type(error).__name__, error)
    return NumericalInstabilityError(msg)
