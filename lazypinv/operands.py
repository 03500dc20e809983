# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Lazy operands: the common base class and the adjoint (conjugate transpose).
"""

from typing import Tuple

import numpy as np


class LazyMatrix:
    """
    Base class for the lazy matrix-like values of this package.

    A lazy matrix wraps one *original* operand by reference (never a copy)
    and derives its shape and element type from it on demand. Instances are
    immutable and never cache a materialised result.

    Only `@` is overloaded, by delegating to `lazypinv.dispatch.multiply`.
    Plain ndarray arithmetic is untouched: `__array_ufunc__ = None` merely
    makes `ndarray @ lazy` hand over to `__rmatmul__`.
    """

    __slots__ = ("_parent",)
    __array_ufunc__ = None

    def __init__(self, parent):
        object.__setattr__(self, "_parent", parent)

    def __setattr__(self, name, value):
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    @property
    def parent(self):
        """The wrapped original operand (the same object that was passed in)."""
        return self._parent

    @property
    def shape(self) -> Tuple[int, int]:
        raise NotImplementedError

    @property
    def dtype(self) -> np.dtype:
        return np.asarray(self._parent).dtype

    @property
    def ndim(self) -> int:
        return 2

    def materialize(self) -> np.ndarray:
        """Compute the dense value. Recomputed on every call."""
        raise NotImplementedError

    def __array__(self, dtype=None, copy=None):
        # copy follows the NumPy 2 protocol: True always copies, False never
        # does and refuses a dtype conversion, None copies only if needed
        arr = self.materialize()
        if copy:
            return np.array(arr, dtype=dtype, copy=True)
        if dtype is None or arr.dtype == np.dtype(dtype):
            return arr
        if copy is False:
            raise ValueError(
                f"{self.__class__.__name__} as {np.dtype(dtype)} requires a copy"
            )
        return arr.astype(dtype)

    def __matmul__(self, other):
        from .dispatch import multiply

        return multiply(self, other)

    def __rmatmul__(self, other):
        from .dispatch import multiply

        return multiply(other, self)

    # Display always materialises so the value reads like an ordinary matrix.
    def __repr__(self) -> str:
        rows, cols = self.shape
        body = np.array2string(self.materialize())
        return f"{rows}x{cols} {self.__class__.__name__}:\n{body}"

    def __str__(self) -> str:
        return str(self.materialize())


class Adjoint(LazyMatrix):
    """
    The conjugate transpose X^H of a concrete operand X, held lazily.

    Keeping X itself (rather than X.conj().T, which would be a new object)
    is what lets `adjoint(A) @ A` be recognised by identity.
    """

    __slots__ = ()

    @property
    def shape(self) -> Tuple[int, int]:
        shape = np.shape(self._parent)
        if len(shape) == 1:
            return 1, shape[0]
        rows, cols = shape
        return cols, rows

    def materialize(self) -> np.ndarray:
        X = np.asarray(self._parent)
        if X.ndim == 1:
            return X.conj().reshape(1, -1)
        return X.conj().T

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._parent!r})"


def adjoint(X):
    """
    Lazy conjugate transpose of X.

    The adjoint of an adjoint is the original object. Lazy containers are
    materialised first, since only concrete operands take part in the
    recognised chain.
    """
    if isinstance(X, Adjoint):
        return X.parent
    if isinstance(X, LazyMatrix):
        return Adjoint(X.materialize())
    return Adjoint(X)


def adjointmul(At: Adjoint, B) -> np.ndarray:
    """
    Literal product A^H B for At = adjoint(A), never a lazy container.

    Use this when the dense inner product is wanted even for `B is A`.
    """
    if not isinstance(At, Adjoint):
        raise TypeError(f"adjointmul expects an Adjoint, got: {type(At)}")
    return np.matmul(At.materialize(), np.asarray(B))
