# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Numerical primitives the lazy containers delegate to.

Nothing in here knows about the lazy types; every function takes and
returns plain NumPy arrays.
"""

import logging
import warnings
from typing import Tuple, Union

import numpy as np
import scipy.linalg as sla

logger = logging.getLogger(__name__)

# LAPACK driver for least-squares solves. "gelsy" is the complete
# orthogonal factorisation (QR with column pivoting).
LSTSQ_DRIVER: str = "gelsy"

# Forwarded to every SciPy call.
CHECK_FINITE: bool = True


def inverse_dtype(dtype) -> np.dtype:
    """Element type of an inverse or a solve: at least single-precision float."""
    return np.result_type(dtype, np.float32)


class Factorization:
    """
    Factorisation of a Hermitian (ideally positive definite) matrix M.

    Either a Cholesky factorisation or, when Cholesky was refused, an LU
    factorisation of the same matrix. Build one with `factorize_hermitian`.

    Attributes
    ----------
    kind : str
        "cholesky" or "lu".
    factors : tuple
        The output of `scipy.linalg.cho_factor` or `scipy.linalg.lu_factor`.
    is_singular : bool
        True when the LU factorisation has an exactly zero pivot.
    """

    def __init__(self, kind: str, factors: Tuple[np.ndarray, Union[bool, np.ndarray]]):
        if kind not in ("cholesky", "lu"):
            raise ValueError(f"Unknown factorization kind: {kind!r}")
        self.kind = kind
        self.factors = factors
        self.is_singular = kind == "lu" and bool(np.any(np.diag(factors[0]) == 0))

    @property
    def shape(self) -> Tuple[int, int]:
        return self.factors[0].shape

    def solve(self, B: np.ndarray) -> np.ndarray:
        """
        Solve M X = B. A vector B gives a vector X.

        Raises
        ------
        numpy.linalg.LinAlgError : if the LU factorisation is exactly singular.
        ValueError : if B does not have M's row count.
        """
        if self.is_singular:
            raise np.linalg.LinAlgError("Singular matrix")
        if self.kind == "cholesky":
            return sla.cho_solve(self.factors, B, check_finite=CHECK_FINITE)
        return sla.lu_solve(self.factors, B, check_finite=CHECK_FINITE)

    def inverse(self) -> np.ndarray:
        """Return inv(M) by solving against the identity."""
        lu_or_c = self.factors[0]
        eye = np.eye(lu_or_c.shape[0], dtype=lu_or_c.dtype)
        return self.solve(eye)

    def __repr__(self) -> str:
        n, _ = self.shape
        return f"{self.__class__.__name__}(kind={self.kind!r}, size={n})"


def factorize_hermitian(M: np.ndarray) -> Factorization:
    """
    Factorise M with Cholesky, falling back once to LU.

    The retry happens only when `scipy.linalg.cho_factor` reports that M is
    not numerically positive definite. The LU factorisation never raises
    for singular input; the result is flagged instead and using it raises.

    Parameters
    ----------
    M : (n, n) ndarray
        Hermitian matrix, typically A^H A.

    Returns
    -------
    Factorization
    """
    M = np.asarray(M)
    try:
        return Factorization("cholesky", sla.cho_factor(M, check_finite=CHECK_FINITE))
    except np.linalg.LinAlgError as e:
        logger.debug(f"{e}; Cholesky refused, falling back to LU...")

    with warnings.catch_warnings():
        # lu_factor warns on an exactly zero pivot; it is recorded on the
        # Factorization as is_singular and raised when the factors are used
        warnings.simplefilter("ignore", sla.LinAlgWarning)
        factorization = Factorization("lu", sla.lu_factor(M, check_finite=CHECK_FINITE))

    if factorization.is_singular:
        logger.warning("factorize_hermitian(): LU fallback found an exactly zero pivot")
    return factorization


def lstsq_qr(A: np.ndarray, B: np.ndarray) -> np.ndarray:
    """
    Solve min ||A X - B||_2 with a pivoted QR (complete orthogonal) solve.

    Returns
    -------
    X : (n,) or (n, k) ndarray
    """
    X, _res, _rank, _s = sla.lstsq(
        A, B, lapack_driver=LSTSQ_DRIVER, check_finite=CHECK_FINITE
    )
    return X


def pinv(A: np.ndarray) -> np.ndarray:
    """Moore-Penrose pseudoinverse of A via the SVD."""
    return sla.pinv(A, check_finite=CHECK_FINITE)


def solve_literal(A: np.ndarray, B: np.ndarray) -> np.ndarray:
    """
    The plain meaning of A \\ B: a square A is solved with LU, anything else
    by least squares.
    """
    A = np.asarray(A)
    B = np.asarray(B)
    if A.ndim == 2 and A.shape[0] == A.shape[1]:
        return sla.solve(A, B, check_finite=CHECK_FINITE)
    return lstsq_qr(A, B)


def inv_literal(A: np.ndarray) -> np.ndarray:
    """Plain dense inverse."""
    return sla.inv(np.asarray(A), check_finite=CHECK_FINITE)
