"""Tests for the HittableList aggregate."""

import pytest


def _sphere(z: float):
    from raygun.geometry.sphere import Sphere
    from raygun.materials.lambertian import Lambertian

    return Sphere((0.0, 0.0, z), 0.5, Lambertian((0.5, 0.5, 0.5)))


class TestHittableList:
    """Tests for building and flattening lists."""

    def test_empty_list(self):
        from raygun.geometry.hittable_list import HittableList

        world = HittableList()
        assert len(world) == 0
        assert list(world.flatten()) == []

    def test_add_preserves_order(self):
        from raygun.geometry.hittable_list import HittableList

        a, b = _sphere(-1.0), _sphere(-2.0)
        world = HittableList([a])
        world.add(b)

        assert world.children == (a, b)
        assert list(world) == [a, b]

    def test_flatten_nested_depth_first(self):
        from raygun.geometry.hittable_list import HittableList

        a, b, c, d = (_sphere(-float(i)) for i in range(1, 5))
        inner = HittableList([b, HittableList([c])])
        world = HittableList([a, inner, d])

        assert list(world.flatten()) == [a, b, c, d]

    def test_add_rejects_non_hittable(self):
        from raygun.geometry.hittable_list import HittableList

        world = HittableList()
        with pytest.raises(TypeError):
            world.add("sphere")

    def test_constructor_rejects_non_hittable(self):
        from raygun.geometry.hittable_list import HittableList

        with pytest.raises(TypeError):
            HittableList([_sphere(-1.0), (0.0, 0.0, -1.0)])

    def test_cannot_contain_itself(self):
        from raygun.geometry.hittable_list import HittableList

        world = HittableList()
        with pytest.raises(ValueError):
            world.add(world)

    def test_cannot_create_cycle(self):
        from raygun.geometry.hittable_list import HittableList

        outer = HittableList()
        inner = HittableList()
        outer.add(inner)
        with pytest.raises(ValueError):
            inner.add(outer)
