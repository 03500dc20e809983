# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
The three lazy stages of inv(A^H A) A^H b.

    InnerProduct(A)          A^H A
    InverseInnerProduct(A)   inv(A^H A)
    LeftPseudoinverse(A)     inv(A^H A) A^H

Each stores only A. Deciding *when* one of these is built lives in
`lazypinv.dispatch`; this module only says what each stage computes.
"""

import logging
from typing import Tuple

import numpy as np

from .operands import Adjoint, LazyMatrix, adjoint, adjointmul
from .utils import Factorization, factorize_hermitian, inverse_dtype, lstsq_qr, pinv

logger = logging.getLogger(__name__)


def _dense(B) -> np.ndarray:
    """B as an ndarray; lazy operands are materialised."""
    if isinstance(B, LazyMatrix):
        return B.materialize()
    return np.asarray(B)


class InnerProduct(LazyMatrix):
    """
    A^H A for a matrix A, held as A.

    Acts like a positive (semi)definite matrix: it can be solved against
    with a Cholesky factorisation, and `inverse()` gives the lazy
    InverseInnerProduct rather than a dense inverse.
    """

    __slots__ = ()

    @property
    def shape(self) -> Tuple[int, int]:
        n = np.shape(self._parent)[1]
        return n, n

    def materialize(self) -> np.ndarray:
        return adjointmul(adjoint(self._parent), self._parent)

    def factorize(self) -> Factorization:
        """Cholesky factorisation of A^H A, LU if Cholesky is refused."""
        return factorize_hermitian(self.materialize())

    def solve(self, B) -> np.ndarray:
        """(A^H A) \\ B, i.e. the solution of the normal equations."""
        return self.factorize().solve(_dense(B))

    def inverse(self) -> "InverseInnerProduct":
        return InverseInnerProduct(self._parent)

    def left_multiply(self, B) -> np.ndarray:
        # plain products gain nothing from a factorisation
        return self.materialize() @ _dense(B)


class InverseInnerProduct(LazyMatrix):
    """
    inv(A^H A) for a matrix A, held as A.

    Multiplying it by something is done as a solve against the Cholesky
    factors of A^H A; the dense inverse is only formed by `materialize()`
    or when it sits on the right of a product.
    """

    __slots__ = ()

    @property
    def shape(self) -> Tuple[int, int]:
        n = np.shape(self._parent)[1]
        return n, n

    @property
    def dtype(self) -> np.dtype:
        return inverse_dtype(np.asarray(self._parent).dtype)

    def factorize(self) -> Factorization:
        return InnerProduct(self._parent).factorize()

    def materialize(self) -> np.ndarray:
        return self.factorize().inverse()

    def left_multiply(self, B):
        """
        inv(A^H A) @ B.

        If B is the adjoint of the very same A this is inv(A^H A) A^H and the
        lazy LeftPseudoinverse is returned. Otherwise solve against B.
        """
        if isinstance(B, Adjoint) and B.parent is self._parent:
            logger.debug("inv(A'A) @ A' recognised, deferring to LeftPseudoinverse")
            return LeftPseudoinverse(self._parent)
        return self.factorize().solve(_dense(B))

    def right_multiply(self, B) -> np.ndarray:
        """B @ inv(A^H A). No shortcut on this side."""
        return _dense(B) @ self.materialize()


class LeftPseudoinverse(LazyMatrix):
    """
    inv(A^H A) A^H for a matrix A, held as A.

    Displays and materialises like pinv(A), but multiplying it by b
    computes the least-squares solution of A x = b with a QR-based solve.
    """

    __slots__ = ()

    @property
    def shape(self) -> Tuple[int, int]:
        rows, cols = np.shape(self._parent)
        return cols, rows

    @property
    def dtype(self) -> np.dtype:
        return inverse_dtype(np.asarray(self._parent).dtype)

    def materialize(self) -> np.ndarray:
        return pinv(np.asarray(self._parent))

    def left_multiply(self, B) -> np.ndarray:
        # A \ B directly; none of the intermediate stages are evaluated
        return lstsq_qr(np.asarray(self._parent), _dense(B))

    def right_multiply(self, B) -> np.ndarray:
        return _dense(B) @ self.materialize()
