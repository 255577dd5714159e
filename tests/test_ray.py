"""Unit tests for the ray module.

Tests cover:
- Ray dataclass and ray_at function
- Vector utility functions (dot, normalize, reflect, near_zero)
- Uniform unit vector sampling
- Host-side vector validation
"""

import math

import pytest
import taichi as ti


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at_origin(self):
        """Test ray_at returns origin when t=0."""
        from raygun.core.ray import Ray, ray_at, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-12
        assert abs(r[1] - 2.0) < 1e-12
        assert abs(r[2] - 3.0) < 1e-12

    def test_ray_at_unnormalized_direction(self):
        """Test ray_at scales with the direction's length."""
        from raygun.core.ray import make_ray, ray_at, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 0.0, 0.0), vec3(0.0, 2.0, 0.0))
            result[None] = ray_at(ray, 1.5)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-12
        assert abs(r[1] - 3.0) < 1e-12
        assert abs(r[2]) < 1e-12


class TestVectorUtilities:
    """Tests for vector helper functions."""

    def test_dot_and_length_squared(self):
        from raygun.core.ray import dot, length_squared, vec3

        result = ti.field(dtype=ti.f64, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = dot(vec3(1.0, 2.0, 3.0), vec3(4.0, -5.0, 6.0))
            result[1] = length_squared(vec3(1.0, 2.0, 2.0))

        test_kernel()
        assert result[0] == pytest.approx(12.0)
        assert result[1] == pytest.approx(9.0)

    def test_normalize_gives_unit_length(self):
        from raygun.core.ray import normalize, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = normalize(vec3(3.0, 0.0, 4.0))

        test_kernel()
        r = result[None]
        assert r[0] == pytest.approx(0.6)
        assert r[1] == pytest.approx(0.0)
        assert r[2] == pytest.approx(0.8)

    def test_reflect_about_normal(self):
        """Test reflect mirrors the normal component only."""
        from raygun.core.ray import reflect, vec3

        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        assert r[0] == pytest.approx(1.0)
        assert r[1] == pytest.approx(1.0)
        assert r[2] == pytest.approx(0.0)

    def test_near_zero(self):
        from raygun.core.ray import near_zero, vec3

        result = ti.field(dtype=ti.i32, shape=3)

        @ti.kernel
        def test_kernel():
            result[0] = near_zero(vec3(0.0, 0.0, 0.0))
            result[1] = near_zero(vec3(1e-9, -1e-9, 1e-9))
            result[2] = near_zero(vec3(1e-9, 1e-3, 0.0))

        test_kernel()
        assert result[0] == 1
        assert result[1] == 1
        assert result[2] == 0


class TestRandomUnitVector:
    """Tests for uniform direction sampling."""

    def test_samples_have_unit_length(self):
        from raygun.core.ray import length_squared, random_unit_vector
        from raygun.core.rng import seed_stream

        n = 1000
        lengths = ti.field(dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                state = seed_stream(ti.u32(7), ti.cast(i, ti.u32))
                _, v = random_unit_vector(state)
                lengths[i] = length_squared(v)

        test_kernel()
        values = lengths.to_numpy()
        assert abs(values - 1.0).max() < 1e-9

    def test_samples_are_centered(self):
        """The mean of many uniform directions is close to the origin."""
        from raygun.core.ray import random_unit_vector
        from raygun.core.rng import seed_stream

        n = 20000
        samples = ti.Vector.field(3, dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                state = seed_stream(ti.u32(11), ti.cast(i, ti.u32))
                _, v = random_unit_vector(state)
                samples[i] = v

        test_kernel()
        mean = samples.to_numpy().mean(axis=0)
        assert abs(mean).max() < 0.03


class TestHostValidation:
    """Tests for check_vector and check_direction."""

    def test_check_vector_converts_to_floats(self):
        from raygun.core.ray import check_vector

        assert check_vector([1, 2, 3], "center") == (1.0, 2.0, 3.0)

    @pytest.mark.parametrize(
        "value",
        [(1.0, 2.0), (1.0, 2.0, 3.0, 4.0), (math.nan, 0.0, 0.0), (math.inf, 0.0, 0.0), "abc"],
    )
    def test_check_vector_rejects_malformed(self, value):
        from raygun.core.ray import check_vector

        with pytest.raises(ValueError):
            check_vector(value, "center")

    def test_check_direction_rejects_zero_vector(self):
        from raygun.core.ray import check_direction

        with pytest.raises(ValueError, match="zero vector"):
            check_direction((0.0, 0.0, 0.0))

    def test_check_direction_accepts_tiny_vector(self):
        from raygun.core.ray import check_direction

        assert check_direction((0.0, 1e-12, 0.0)) == (0.0, 1e-12, 0.0)
