"""Integration tests for the end-to-end rendering pipeline.

These tests build scenes, render them and check the output. They are kept
fast (low resolution, few samples) while still exercising every module.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

import numpy as np
import pytest
import taichi as ti


class TestDefaultWorld:
    """Tests for the demo world factory."""

    def test_world_layout(self):
        from raygun.materials.lambertian import Lambertian
        from raygun.materials.metal import Metal
        from raygun.scene.default_scene import create_default_world

        center, ground, left, right = create_default_world().flatten()

        assert center.center == (0.0, 0.0, -1.0)
        assert center.radius == 0.5
        assert ground.center == (0.0, -100.5, -1.0)
        assert ground.radius == 100.0
        assert ground.material == Lambertian((0.8, 0.8, 0.0))
        assert center.material == Lambertian((0.7, 0.3, 0.3))
        assert left.center == (-1.0, 0.0, -1.0)
        assert left.material == Metal((0.8, 0.8, 0.8), 0.3)
        assert right.center == (1.0, 0.0, -1.0)
        assert right.material == Metal((0.8, 0.6, 0.2), 0.8)

    def test_default_scene_uploads_world(self):
        from raygun.scene.default_scene import create_default_scene
        from raygun.scene.manager import MaterialType

        scene, camera = create_default_scene()

        assert scene.get_sphere_count() == 4
        assert scene.get_material_count() == 4
        assert [m.material_type for m in scene.materials] == [
            MaterialType.LAMBERTIAN,
            MaterialType.LAMBERTIAN,
            MaterialType.METAL,
            MaterialType.METAL,
        ]
        assert camera.aspect_ratio == pytest.approx(16.0 / 9.0)

    def test_center_sphere_comes_first(self):
        from raygun.scene.default_scene import create_default_scene
        from raygun.scene.intersection import intersect

        scene, _ = create_default_scene()

        hit = intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit.material_id == 0
        assert scene.get_material_info(0).params["albedo"] == (0.7, 0.3, 0.3)
        assert scene.spheres[1].radius == 100.0


class TestEndToEnd:
    """Full pipeline tests."""

    def test_single_pixel_single_bounce_is_black(self):
        """A pixel whose only sample hits a surface with no bounces left is black."""
        from raygun.camera.pinhole import PinholeCamera
        from raygun.core.renderer import Renderer, RenderSettings
        from raygun.geometry.sphere import Sphere
        from raygun.materials.lambertian import Lambertian
        from raygun.scene.manager import SceneManager

        scene = SceneManager()
        # Large enough to fill the whole field of view
        scene.load_world(Sphere((0.0, 0.0, -3.0), 2.9, Lambertian((0.9, 0.9, 0.9))))

        settings = RenderSettings(width=1, aspect_ratio=1.0, samples_per_pixel=1, max_depth=1)
        image = Renderer(settings, PinholeCamera(aspect_ratio=1.0)).render()

        assert image.shape == (1, 1, 3)
        assert image.tolist() == [[[0.0, 0.0, 0.0]]]

    def test_single_pixel_seeded_diffuse_bounce(self):
        """One diffuse bounce into the sky reproduces the pixel's random draws.

        The pixel's stream yields the jitter (du, dv) and then the unit vector
        of the Lambertian scatter; the escaping ray picks up the sky gradient
        weighted by the albedo.
        """
        from raygun.camera.pinhole import PinholeCamera
        from raygun.core.ray import random_unit_vector
        from raygun.core.renderer import Renderer, RenderSettings
        from raygun.core.rng import random_real, seed_stream
        from raygun.geometry.sphere import Sphere
        from raygun.materials.lambertian import Lambertian
        from raygun.scene.manager import SceneManager

        seed = 7
        albedo = np.array([0.9, 0.6, 0.3])
        center = np.array([0.0, 0.0, -3.0])
        radius = 2.9

        scene = SceneManager()
        scene.load_world(Sphere(tuple(center), radius, Lambertian(tuple(albedo))))

        settings = RenderSettings(
            width=1, aspect_ratio=1.0, samples_per_pixel=1, max_depth=2, seed=seed
        )
        renderer = Renderer(settings, PinholeCamera(aspect_ratio=1.0))
        image = renderer.render()

        draws = ti.field(dtype=ti.f64, shape=5)

        @ti.kernel
        def replay_stream(render_seed: ti.u32):
            state = seed_stream(render_seed, ti.u32(0))
            state, du = random_real(state)
            state, dv = random_real(state)
            state, unit = random_unit_vector(state)
            draws[0] = du
            draws[1] = dv
            for c in ti.static(range(3)):
                draws[2 + c] = unit[c]

        replay_stream(seed)
        du, dv, *unit = draws.to_numpy()

        # Primary ray through the 2x2 viewport at z = -1
        direction = np.array([-1.0 + 2.0 * du, -1.0 + 2.0 * dv, -1.0])
        oc = -center
        a = direction @ direction
        half_b = oc @ direction
        c = oc @ oc - radius * radius
        t = (-half_b - np.sqrt(half_b * half_b - a * c)) / a
        normal = (t * direction - center) / radius

        scattered = normal + np.array(unit)
        s = 0.5 * (scattered[1] / np.linalg.norm(scattered) + 1.0)
        sky = (1.0 - s) * np.ones(3) + s * np.array([0.5, 0.7, 1.0])
        expected = albedo * sky

        assert np.allclose(renderer.linear_image[0, 0], expected, atol=1e-9)
        assert np.allclose(image[0, 0], np.sqrt(expected), atol=1e-9)

    def test_default_scene_render(self, tmp_path):
        from PIL import Image as PILImage

        from raygun.core.renderer import Renderer, RenderSettings
        from raygun.scene.default_scene import create_default_scene

        scene, camera = create_default_scene()
        settings = RenderSettings(width=48, samples_per_pixel=8, max_depth=10, rows_per_batch=7)
        renderer = Renderer(settings, camera)
        image = renderer.render()

        assert image.shape == (27, 48, 3)
        assert not np.any(np.isnan(image))
        assert image.min() >= 0.0
        assert image.max() <= 1.0
        assert np.sum(image) > 0

        # The ground is yellowish: little blue compared to red and green
        bottom = image[-1, :, :].mean(axis=0)
        assert bottom[2] < bottom[0]

        # The top rows see only sky, whose blue channel is 1
        assert np.allclose(image[0, :, 2], 1.0)

        output_path = tmp_path / "default.png"
        renderer.save_image(output_path)
        with PILImage.open(output_path) as img:
            assert img.size == (48, 27)

    def test_scene_from_dict_renders_like_world(self):
        """A scene rebuilt from its configuration renders identically."""
        from raygun.core.renderer import Renderer, RenderSettings
        from raygun.scene.default_scene import create_default_scene

        scene, camera = create_default_scene()
        settings = RenderSettings(width=16, samples_per_pixel=2, max_depth=5, seed=3)
        first = Renderer(settings, camera).render().copy()

        data = scene.to_dict()
        scene.clear()
        scene.from_dict(data)
        second = Renderer(settings, camera).render()

        assert np.array_equal(first, second)

    def test_trace_ray_matches_scene_contents(self):
        """A ray aimed at the center sphere picks up its reddish albedo."""
        from raygun.core.integrator import trace_ray
        from raygun.scene.default_scene import create_default_scene

        create_default_scene()

        colors = np.array(
            [trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), seed=s) for s in range(64)]
        )
        mean = colors.mean(axis=0)
        assert mean[0] > mean[1]
        assert mean[0] > mean[2]
