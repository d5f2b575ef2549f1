import pytest

from nystrom_cv.backend import set_backend
from nystrom_cv.backend import get_backend
from nystrom_cv.backend import ALL_BACKENDS
from nystrom_cv.backend import force_cpu_backend
from nystrom_cv.backend._utils import MATCHING_CPU_BACKEND
from nystrom_cv.backend._utils import _dtype_to_str


@pytest.mark.parametrize('backend', ALL_BACKENDS)
def test_set_backend_correct(backend):
    # test the change of backend
    module = set_backend(backend)
    assert module.__name__.split('.')[-1] == backend

    # test idempotence
    module = set_backend(set_backend(backend))
    assert module.__name__.split('.')[-1] == backend

    # test set and get
    module = set_backend(get_backend())
    assert module.__name__.split('.')[-1] == backend

    assert set_backend(backend)


def test_set_backend_incorrect():
    for backend in ["wrong", ["numpy"], True, None, 10]:
        with pytest.raises(ValueError):
            set_backend(backend)
        with pytest.raises(ValueError):
            set_backend(backend, on_error="raise")
        with pytest.warns(Warning):
            set_backend(backend, on_error="warn")
        with pytest.raises(ValueError):
            set_backend(backend, on_error="foo")


class ToyEstimator():
    def __init__(self, force_cpu):
        self.force_cpu = force_cpu

    @force_cpu_backend
    def get_backend_wrapped(self):
        return get_backend()

    @force_cpu_backend
    def fail(self):
        raise RuntimeError("failure")


@pytest.mark.parametrize('backend', ALL_BACKENDS)
def test_force_cpu_backend(backend):
    backend = set_backend(backend)

    est = ToyEstimator(force_cpu=True)
    assert est.get_backend_wrapped().name == MATCHING_CPU_BACKEND[backend.name]
    assert get_backend().name == backend.name

    est = ToyEstimator(force_cpu=False)
    assert est.get_backend_wrapped().name == backend.name


@pytest.mark.parametrize('backend', ALL_BACKENDS)
def test_force_cpu_backend_restores_on_error(backend):
    backend = set_backend(backend)

    est = ToyEstimator(force_cpu=True)
    with pytest.raises(RuntimeError, match="failure"):
        est.fail()
    assert get_backend().name == backend.name


@pytest.mark.parametrize('backend', ALL_BACKENDS)
def test_dtype_to_str(backend):
    backend = set_backend(backend)
    for dtype in ["float32", "float64"]:
        array = backend.asarray(backend.randn(3, 2), dtype=dtype)
        assert _dtype_to_str(array.dtype) == dtype
        assert _dtype_to_str(dtype) == dtype
    assert _dtype_to_str(None) is None
