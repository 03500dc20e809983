# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
lazypinv
========

Evaluates pseudoinverse expressions such as inv(A'A) A' b lazily, as if
they had been written A \\ b.

Naive normal-equation code is recognised one step at a time and each
step is replaced by a better numerical routine:

- `adjoint(A) @ A` is an `InnerProduct`, solved with Cholesky (LU fallback)
- `inverse(A'A)` is an `InverseInnerProduct`, applied as a Cholesky solve
- `inverse(A'A) @ adjoint(A)` is a `LeftPseudoinverse`, which multiplied by
  b performs a QR-based least-squares solve of A x = b

Recognition is by object identity: the *same* A has to appear on both sides.
Ordinary ndarray arithmetic is never altered.

Public API
~~~~~~~~~~
- Operands
    - `adjoint`, `adjointmul`, `Adjoint`, `LazyMatrix`
- Containers
    - `InnerProduct`, `InverseInnerProduct`, `LeftPseudoinverse`
- Operations
    - `multiply`, `solve`, `inverse`, `materialize`, `size`, `kind_of`
- Factorizations
    - `factorize_hermitian`, `Factorization`

Example
-------
>>> import numpy as np, lazypinv as lp
>>> A = np.random.randn(6, 3)
>>> b = np.random.randn(6)
>>> x = lp.inverse(lp.adjoint(A) @ A) @ lp.adjoint(A) @ b
>>> np.allclose(x, np.linalg.lstsq(A, b, rcond=None)[0])
True
"""

from importlib.metadata import version as _pkg_version

from .containers import InnerProduct, InverseInnerProduct, LeftPseudoinverse
from .dispatch import Kind, inverse, kind_of, materialize, multiply, size, solve
from .operands import Adjoint, LazyMatrix, adjoint, adjointmul
from .utils import Factorization, factorize_hermitian

__all__ = [
    "adjoint",
    "adjointmul",
    "Adjoint",
    "LazyMatrix",
    "InnerProduct",
    "InverseInnerProduct",
    "LeftPseudoinverse",
    "Kind",
    "kind_of",
    "multiply",
    "solve",
    "inverse",
    "materialize",
    "size",
    "Factorization",
    "factorize_hermitian",
]

# ---------------------------------------------------------------------
# Version string
# ---------------------------------------------------------------------
try:  # installed via pip / build backend
    __version__ = _pkg_version(__name__)
except Exception:  # running from a checkout
    __version__ = "0.0.0.dev0"

# ---------------------------------------------------------------------
# Silent unless the application configures logging.
# ---------------------------------------------------------------------
import logging as _logging

_logging.getLogger(__name__).addHandler(_logging.NullHandler())
