from . import backend
from . import exceptions
from . import nystrom
from . import progress_bar
from . import scoring
from . import utils
from . import viz

__version__ = '0.1.0'

__all__ = [
    backend,
    exceptions,
    nystrom,
    progress_bar,
    scoring,
    utils,
    viz,
]
