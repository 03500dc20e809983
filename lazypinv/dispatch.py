# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Pattern recognition for inv(A^H A) A^H b.

Every operand falls in one of five kinds. `multiply`, `solve` and `inverse`
look the (left, right) kinds up in a table; a pair that is not in the table
is evaluated literally, so every combination has an answer.

    raw A           --adjoint(A) @ A-->           InnerProduct(A)
    InnerProduct(A) --inverse-->                  InverseInnerProduct(A)
    InverseInnerProduct(A) --@ adjoint(A)-->      LeftPseudoinverse(A)
    LeftPseudoinverse(A)   --@ b-->               A \\ b  (QR least squares)

Recognition compares operands with `is`. Two different arrays holding the
same numbers are NOT the same operand and go down the literal path; do not
change this to `==` / `np.array_equal`.
"""

import enum
import logging
from typing import Callable, Dict, Tuple

import numpy as np

from .containers import InnerProduct, InverseInnerProduct, LeftPseudoinverse
from .operands import Adjoint, LazyMatrix, adjointmul
from .utils import inv_literal, solve_literal

logger = logging.getLogger(__name__)


class Kind(enum.Enum):
    CONCRETE = "concrete"
    ADJOINT = "adjoint"
    INNER_PRODUCT = "inner_product"
    INVERSE_INNER_PRODUCT = "inverse_inner_product"
    LEFT_PSEUDOINVERSE = "left_pseudoinverse"


_KINDS = (
    (Adjoint, Kind.ADJOINT),
    (InnerProduct, Kind.INNER_PRODUCT),
    (InverseInnerProduct, Kind.INVERSE_INNER_PRODUCT),
    (LeftPseudoinverse, Kind.LEFT_PSEUDOINVERSE),
)


def kind_of(x) -> Kind:
    """Operand kind of x; anything that is not a lazy type is concrete."""
    for cls, kind in _KINDS:
        if isinstance(x, cls):
            return kind
    return Kind.CONCRETE


def materialize(x) -> np.ndarray:
    """Dense value of x. Lazy operands are computed, concrete ones converted."""
    if isinstance(x, LazyMatrix):
        return x.materialize()
    return np.asarray(x)


def size(x) -> Tuple[int, ...]:
    """Shape of x, derived without materialising lazy operands."""
    if isinstance(x, LazyMatrix):
        return x.shape
    return np.shape(x)


# ---------------------------------------------------------------------
# multiply
# ---------------------------------------------------------------------
def _multiply_literal(left, right):
    logger.debug(f"multiply: literal {kind_of(left).value} @ {kind_of(right).value}")
    return np.matmul(materialize(left), materialize(right))


def _adjoint_times_concrete(left: Adjoint, right):
    A = left.parent
    if right is A and np.ndim(A) == 2:
        logger.debug("A' @ A recognised, deferring to InnerProduct")
        return InnerProduct(A)
    return adjointmul(left, right)


def _inner_product_times(left: InnerProduct, right):
    return left.left_multiply(right)


def _inverse_inner_product_times(left: InverseInnerProduct, right):
    return left.left_multiply(right)


def _times_inverse_inner_product(left, right: InverseInnerProduct):
    return right.right_multiply(left)


def _left_pseudoinverse_times(left: LeftPseudoinverse, right):
    return left.left_multiply(right)


def _times_left_pseudoinverse(left, right: LeftPseudoinverse):
    return right.right_multiply(left)


# A lazy container on the left keeps its own algorithm whatever the right
# operand is; a lazy right operand is materialised by the container.
_MULTIPLY: Dict[Tuple[Kind, Kind], Callable] = {
    (Kind.ADJOINT, Kind.CONCRETE): _adjoint_times_concrete,
    (Kind.CONCRETE, Kind.INVERSE_INNER_PRODUCT): _times_inverse_inner_product,
    (Kind.ADJOINT, Kind.INVERSE_INNER_PRODUCT): _times_inverse_inner_product,
    (Kind.CONCRETE, Kind.LEFT_PSEUDOINVERSE): _times_left_pseudoinverse,
    (Kind.ADJOINT, Kind.LEFT_PSEUDOINVERSE): _times_left_pseudoinverse,
}
for _right in Kind:
    _MULTIPLY[(Kind.INNER_PRODUCT, _right)] = _inner_product_times
    _MULTIPLY[(Kind.INVERSE_INNER_PRODUCT, _right)] = _inverse_inner_product_times
    _MULTIPLY[(Kind.LEFT_PSEUDOINVERSE, _right)] = _left_pseudoinverse_times


def multiply(left, right):
    """
    left @ right, with the recognised chain deferred to lazy containers.

    Returns a lazy container when the pair matches a stage of the chain,
    otherwise a dense ndarray. Shape errors come from NumPy/SciPy as is.
    """
    handler = _MULTIPLY.get((kind_of(left), kind_of(right)), _multiply_literal)
    return handler(left, right)


# ---------------------------------------------------------------------
# solve  (left \ right)
# ---------------------------------------------------------------------
def _solve_literal(left, right):
    logger.debug(f"solve: literal {kind_of(left).value} \\ {kind_of(right).value}")
    return solve_literal(materialize(left), materialize(right))


def _inner_product_solve(left: InnerProduct, right):
    return left.solve(materialize(right))


_SOLVE: Dict[Tuple[Kind, Kind], Callable] = {
    (Kind.INNER_PRODUCT, _right): _inner_product_solve for _right in Kind
}


def solve(left, right):
    """
    left \\ right: the X with left @ X = right (least squares if left is
    not square).

    An InnerProduct on the left is solved through its Cholesky (or LU)
    factorisation; everything else is solved literally.
    """
    handler = _SOLVE.get((kind_of(left), kind_of(right)), _solve_literal)
    return handler(left, right)


# ---------------------------------------------------------------------
# inverse
# ---------------------------------------------------------------------
def _inverse_literal(x):
    logger.debug(f"inverse: literal inverse of {kind_of(x).value}")
    return inv_literal(materialize(x))


_INVERSE: Dict[Kind, Callable] = {
    Kind.INNER_PRODUCT: InnerProduct.inverse,
}


def inverse(x):
    """inv(x); for an InnerProduct this is the lazy InverseInnerProduct."""
    handler = _INVERSE.get(kind_of(x), _inverse_literal)
    return handler(x)
