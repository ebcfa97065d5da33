"""End-to-end accuracy checks against brute-force kernel sums."""

import jax.numpy as jnp
import numpy as np
import pytest

from jaxfse import (
    ExpansionConfig,
    FourierExpansion,
    GaussianKernelFourierAux,
    build_kernel_aux,
    direct_kernel_sum,
    direct_kernel_sums,
)


def _synthetic_dataset(n: int = 20, dim: int = 3, seed: int = 0):
    # Coordinate i is drawn from [0, i], as in the classic mapping test set.
    rng = np.random.default_rng(seed)
    upper = np.arange(dim, dtype=np.float64)
    points = rng.uniform(0.0, 1.0, size=(n, dim)) * upper[None, :]
    return jnp.asarray(points, dtype=jnp.float64)


def _approximation_error(aux, points, weights, query, order=None):
    center = jnp.mean(points, axis=0)
    expansion = FourierExpansion(center, aux)
    expansion.accumulate_coeffs(points, weights, 0, points.shape[0], order)
    approx = expansion.evaluate_field(query, query.shape[0], order=order)
    exact = float(direct_kernel_sum(aux.kernel, points, weights, query))
    return abs(approx - exact)


def test_order_two_table_size_in_three_dimensions():
    aux = GaussianKernelFourierAux(30.0, 2, 3)

    assert aux.enumerator.size == 5**3
    assert FourierExpansion(jnp.zeros((3,)), aux).get_coeffs().shape == (125,)


def test_error_shrinks_with_order_at_fixed_truncation_limit():
    points = _synthetic_dataset()
    weights = jnp.ones((20,), dtype=jnp.float64)
    query = jnp.full((3,), 2.0, dtype=jnp.float64)
    bandwidth = 30.0

    errors = []
    for order in range(1, 6):
        aux = GaussianKernelFourierAux(bandwidth, order, 3)
        aux.set_integral_truncation_limit(bandwidth * 3.0)
        errors.append(_approximation_error(aux, points, weights, query))

    assert all(later <= earlier for earlier, later in zip(errors, errors[1:]))
    assert errors[-1] < 1e-4
    assert errors[-1] < errors[0] * 1e-3


def test_error_shrinks_with_order_at_default_truncation_limit():
    points = _synthetic_dataset()
    weights = jnp.ones((20,), dtype=jnp.float64)
    query = jnp.full((3,), 2.0, dtype=jnp.float64)

    errors = [
        _approximation_error(GaussianKernelFourierAux(30.0, order, 3), points, weights, query)
        for order in range(1, 6)
    ]

    assert all(later <= earlier for earlier, later in zip(errors, errors[1:]))
    assert errors[-1] < 1e-2


def test_lower_order_evaluation_of_one_expansion_tracks_error():
    points = _synthetic_dataset()
    weights = jnp.ones((20,), dtype=jnp.float64)
    query = jnp.full((3,), 2.0, dtype=jnp.float64)
    aux = GaussianKernelFourierAux(30.0, 5, 3, integral_truncation_limit=90.0)

    errors = [
        _approximation_error(aux, points, weights, query, order=order)
        for order in range(1, 6)
    ]

    assert all(later <= earlier for earlier, later in zip(errors, errors[1:]))


@pytest.mark.parametrize("order", [1, 3, 5])
def test_observed_error_is_within_error_bound(order):
    points = _synthetic_dataset()
    weights = jnp.ones((20,), dtype=jnp.float64)
    query = jnp.full((3,), 2.0, dtype=jnp.float64)
    aux = GaussianKernelFourierAux(30.0, order, 3, integral_truncation_limit=90.0)

    error = _approximation_error(aux, points, weights, query)
    max_displacement = float(jnp.max(jnp.abs(points - query[None, :])))
    bound = aux.error_bound(float(jnp.sum(weights)), max_displacement)
    assert error <= bound


def test_weighted_sums_match_direct_sums_for_many_queries():
    rng = np.random.default_rng(21)
    points = jnp.asarray(rng.uniform(-1.0, 1.0, size=(200, 2)), dtype=jnp.float64)
    weights = jnp.asarray(rng.uniform(0.0, 2.0, size=(200,)), dtype=jnp.float64)
    queries = jnp.asarray(rng.uniform(-1.5, 1.5, size=(16, 2)), dtype=jnp.float64)
    aux = build_kernel_aux(ExpansionConfig(bandwidth=1.0, order=8, dim=2))

    expansion = FourierExpansion(jnp.zeros((2,)), aux, chunk_size=64)
    expansion.accumulate_coeffs(points, weights)
    approx = np.asarray(expansion.evaluate_fields(queries))
    exact = np.asarray(direct_kernel_sums(aux.kernel, points, weights, queries))

    assert np.allclose(approx, exact, rtol=1e-5, atol=1e-5)


def test_order_zero_is_independent_of_query_position():
    points = _synthetic_dataset()
    weights = jnp.ones((20,), dtype=jnp.float64)
    aux = GaussianKernelFourierAux(30.0, 0, 3)
    expansion = FourierExpansion(jnp.mean(points, axis=0), aux)
    expansion.accumulate_coeffs(points, weights)

    values = [
        expansion.evaluate_field(jnp.asarray(q, dtype=jnp.float64))
        for q in ([2.0, 2.0, 2.0], [-2.0, 2.0, -2.0], [0.0, 0.0, 40.0])
    ]
    assert values[0] == pytest.approx(20.0 * aux.scale((0, 0, 0)))
    assert values[1] == pytest.approx(values[0])
    assert values[2] == pytest.approx(values[0])
