from ._cholesky import cholesky_rank_one_update
from ._cholesky import cholesky_append_column
from ._cholesky import solve_cholesky
from ._split import train_validation_split
from ._incremental import IncrementalNystromState
from ._grid_search import BestModelRecorder
from ._grid_search import NystromCVResults
from ._grid_search import make_landmark_grid
from ._grid_search import solve_nystrom_ridge_cv_incremental
from ._grid_search import solve_nystrom_ridge_cv_cholesky
from ._grid_search import NYSTROM_RIDGE_CV_SOLVERS
from ._sklearn_api import NystromKernelRidgeCV
from ._kernels import PAIRWISE_KERNEL_FUNCTIONS
from ._kernels import pairwise_kernels
from ._kernels import gaussian_kernel
from ._kernels import laplacian_kernel
from ._kernels import linear_kernel
from ._kernels import polynomial_kernel
from ._kernels import rbf_kernel

__all__ = [
    # factorization
    cholesky_rank_one_update,
    cholesky_append_column,
    solve_cholesky,
    IncrementalNystromState,
    # cross-validation
    train_validation_split,
    make_landmark_grid,
    BestModelRecorder,
    NystromCVResults,
    solve_nystrom_ridge_cv_incremental,
    solve_nystrom_ridge_cv_cholesky,
    NYSTROM_RIDGE_CV_SOLVERS,
    # scikit-learn API
    NystromKernelRidgeCV,
    # kernels
    PAIRWISE_KERNEL_FUNCTIONS,
    pairwise_kernels,
    gaussian_kernel,
    laplacian_kernel,
    linear_kernel,
    polynomial_kernel,
    rbf_kernel,
]
