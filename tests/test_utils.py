# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging

import numpy as np
import pytest
import scipy.linalg as sla

from lazypinv.utils import (
    Factorization,
    factorize_hermitian,
    inv_literal,
    inverse_dtype,
    lstsq_qr,
    pinv,
    solve_literal,
)

logger = logging.getLogger(__name__)


def test_factorize_positive_definite_uses_cholesky():
    rng = np.random.default_rng(0)
    X = rng.normal(size=(20, 6))
    M = X.T @ X
    B = rng.normal(size=(6, 3))

    F = factorize_hermitian(M)
    assert F.kind == "cholesky"
    assert not F.is_singular
    np.testing.assert_allclose(F.solve(B), np.linalg.solve(M, B), rtol=1e-10)


def test_factorize_indefinite_falls_back_to_lu(caplog):
    # symmetric and invertible, but not positive definite
    M = np.array([[1.0, 2.0], [2.0, 1.0]])
    b = np.array([3.0, 3.0])

    caplog.set_level(logging.DEBUG, logger="lazypinv")
    F = factorize_hermitian(M)

    assert F.kind == "lu"
    assert not F.is_singular
    np.testing.assert_allclose(F.solve(b), [1.0, 1.0])
    assert "falling back to LU" in caplog.text


def test_factorize_rank_deficient_does_not_raise(caplog):
    # X'X for X with a repeated column [1, 1, 1, 1]
    X = np.array([[1.0, 1.0, 1.0], [1.0, 1.0, 0.0], [1.0, 1.0, 0.0], [1.0, 1.0, 1.0]])
    M = X.T @ X

    caplog.set_level(logging.DEBUG, logger="lazypinv")
    F = factorize_hermitian(M)

    assert F.kind == "lu"
    assert F.is_singular
    assert np.all(np.isfinite(F.factors[0]))
    assert "exactly zero pivot" in caplog.text

    # the failure surfaces once the factors are used
    with pytest.raises(np.linalg.LinAlgError):
        F.solve(np.ones(3))
    with pytest.raises(np.linalg.LinAlgError):
        F.inverse()


def test_factorization_inverse_matches_numpy():
    rng = np.random.default_rng(1)
    X = rng.normal(size=(10, 4))
    M = X.T @ X

    F = factorize_hermitian(M)
    np.testing.assert_allclose(F.inverse(), np.linalg.inv(M), rtol=1e-9, atol=1e-12)
    assert F.shape == (4, 4)
    assert repr(F) == "Factorization(kind='cholesky', size=4)"


def test_factorization_rejects_unknown_kind():
    with pytest.raises(ValueError):
        Factorization("qr", (np.eye(2), None))


def test_factorize_complex_hermitian():
    rng = np.random.default_rng(2)
    X = rng.normal(size=(8, 3)) + 1j * rng.normal(size=(8, 3))
    M = X.conj().T @ X
    b = rng.normal(size=3) + 1j * rng.normal(size=3)

    F = factorize_hermitian(M)
    assert F.kind == "cholesky"
    np.testing.assert_allclose(F.solve(b), np.linalg.solve(M, b), rtol=1e-10)


def test_factorization_solve_dimension_mismatch():
    F = factorize_hermitian(np.eye(3))
    with pytest.raises(ValueError):
        F.solve(np.ones(4))


@pytest.mark.parametrize("m,n", [(8, 3), (30, 10), (5, 5)])
def test_lstsq_qr_matches_numpy(m, n):
    rng = np.random.default_rng(seed=m + n)
    A = rng.normal(size=(m, n))
    b = rng.normal(size=m)

    x_np, *_ = np.linalg.lstsq(A, b, rcond=None)
    x_qr = lstsq_qr(A, b)
    np.testing.assert_allclose(x_qr, x_np, rtol=1e-9, atol=1e-12)


def test_pinv_matches_numpy():
    rng = np.random.default_rng(3)
    A = rng.normal(size=(7, 4))
    np.testing.assert_allclose(pinv(A), np.linalg.pinv(A), rtol=1e-9, atol=1e-12)


def test_solve_literal_square_and_rectangular():
    rng = np.random.default_rng(4)
    S = rng.normal(size=(4, 4)) + 4 * np.eye(4)
    R = rng.normal(size=(9, 4))
    b4 = rng.normal(size=4)
    b9 = rng.normal(size=9)

    np.testing.assert_allclose(solve_literal(S, b4), np.linalg.solve(S, b4), rtol=1e-10)
    np.testing.assert_allclose(
        solve_literal(R, b9), sla.lstsq(R, b9, lapack_driver="gelsy")[0]
    )


def test_inv_literal_singular_raises():
    with pytest.raises(np.linalg.LinAlgError):
        inv_literal(np.zeros((3, 3)))


@pytest.mark.parametrize(
    "dtype,expected",
    [
        (np.int64, np.float64),
        (np.float32, np.float32),
        (np.float64, np.float64),
        (np.complex64, np.complex64),
        (np.complex128, np.complex128),
    ],
)
def test_inverse_dtype(dtype, expected):
    assert inverse_dtype(np.dtype(dtype)) == np.dtype(expected)
