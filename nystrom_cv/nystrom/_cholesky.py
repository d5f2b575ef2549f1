"""Updates of upper triangular Cholesky factors, and the associated solver.

All factors ``R`` are upper triangular, and factorize ``M = R.T @ R``.
"""
import math

from ..backend import get_backend
from ..exceptions import NumericalInstabilityError


def cholesky_rank_one_update(R, x, sign=1):
    """Rank-one update (sign=1) or downdate (sign=-1) of a Cholesky factor.

    Modify R inplace, such that::

        R_new.T @ R_new = R.T @ R + sign * x @ x.T

    with O(p^2) operations, instead of O(p^3) for a new factorization.

    Parameters
    ----------
    R : array of shape (p, p)
        Upper triangular Cholesky factor. Modified inplace. Only the last
        diagonal element can be zero.
    x : array of shape (p, )
        Update vector. Not modified.
    sign : int in {1, -1}
        1 for an update, -1 for a downdate.

    Returns
    -------
    R : array of shape (p, p)
        Updated Cholesky factor (same object as the input).
    """
    if sign not in (1, -1):
        raise ValueError("Unknown sign=%r, expected 1 or -1." % (sign, ))
    backend = get_backend()

    x = backend.copy(x)
    p = R.shape[0]
    for kk in range(p):
        pivot = R[kk, kk] ** 2 + sign * x[kk] ** 2
        if not float(pivot) > 0:
            raise NumericalInstabilityError(
                "Cholesky %s lost positive-definiteness at row %d (squared "
                "pivot=%r)." % ("update" if sign == 1 else "downdate", kk,
                                float(pivot)))
        radius = backend.sqrt(pivot)

        if kk + 1 < p:
            if float(R[kk, kk]) == 0:
                raise ValueError("Singular Cholesky factor, zero diagonal "
                                 "element at row %d." % kk)
            cos = radius / R[kk, kk]
            sin = x[kk] / R[kk, kk]
            R[kk, kk + 1:] = (R[kk, kk + 1:] + sign * sin * x[kk + 1:]) / cos
            x[kk + 1:] = cos * x[kk + 1:] - sin * R[kk, kk + 1:]

        R[kk, kk] = radius

    return R


def _append_column_inplace(R, c, gamma):
    """Extend a Cholesky factor by one row and one column, inplace.

    R is of shape (p + 1, p + 1), with its leading (p, p) block factorizing
    M, and a zero last row and last column. Afterward, R factorizes::

        [[M,   c    ],
         [c.T, gamma]]

    The new matrix is obtained from [[M, 0], [0, 0]] by an update with
    u = [c / (1 + s), s] followed by a downdate with v = [c / (1 + s), -1],
    where s = sqrt(1 + gamma), since u @ u.T - v @ v.T = [[0, c], [c.T,
    gamma]].
    """
    backend = get_backend()
    gamma = float(gamma)
    if not gamma > -1:
        raise NumericalInstabilityError(
            "Cannot append a column with gamma=%r <= -1." % gamma)

    s = math.sqrt(1 + gamma)
    w = c / (1 + s)
    u = backend.concatenate([w, backend.full_like(w, fill_value=s,
                                                  shape=(1, ))])
    v = backend.concatenate([w, backend.full_like(w, fill_value=-1,
                                                  shape=(1, ))])

    cholesky_rank_one_update(R, u, sign=1)
    cholesky_rank_one_update(R, v, sign=-1)
    return R


def cholesky_append_column(R, c, gamma):
    """Cholesky factor of a matrix extended by one row and one column.

    Parameters
    ----------
    R : array of shape (p, p)
        Upper triangular Cholesky factor of M.
    c : array of shape (p, )
        New column, without its diagonal element.
    gamma : float or 0-d array
        New diagonal element.

    Returns
    -------
    R_new : array of shape (p + 1, p + 1)
        Upper triangular Cholesky factor of [[M, c], [c.T, gamma]].
    """
    backend = get_backend()
    p = R.shape[0]
    R_new = backend.zeros_like(R, shape=(p + 1, p + 1))
    R_new[:p, :p] = R
    return _append_column_inplace(R_new, c, gamma)


def solve_cholesky(R, AtY):
    """Solve (R.T @ R) @ coefs = AtY, with two triangular solves.

    Parameters
    ----------
    R : array of shape (n_landmarks, n_landmarks)
        Upper triangular Cholesky factor.
    AtY : array of shape (n_landmarks, n_targets)
        Right-hand side.

    Returns
    -------
    coefs : array of shape (n_landmarks, n_targets)
        Solution R^-1 @ (R^-T @ AtY).
    """
    backend = get_backend()
    return backend.solve_triangular(
        R, backend.solve_triangular(R, AtY, trans=True))
