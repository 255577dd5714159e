"""Tests for render settings and the band-by-band render driver.

Tests cover:
- RenderSettings validation, derived height and dict round trip
- Output buffers: shape, range, gamma encoding
- Determinism per seed and independence from the band size
- Progress reporting through callbacks and the generator form
"""

import numpy as np
import pytest
import taichi as ti


@pytest.fixture
def default_scene():
    from raygun.scene.default_scene import create_default_scene

    scene, camera = create_default_scene()
    yield scene, camera
    scene.clear()


def _small_settings(**overrides):
    from raygun.core.renderer import RenderSettings

    params = {"width": 24, "samples_per_pixel": 4, "max_depth": 8, "rows_per_batch": 5}
    params.update(overrides)
    return RenderSettings(**params)


class TestRenderSettings:
    """Tests for the RenderSettings dataclass."""

    def test_defaults(self):
        from raygun.core.renderer import RenderSettings

        settings = RenderSettings()
        assert settings.width == 400
        assert settings.height == 225
        assert settings.samples_per_pixel == 100
        assert settings.max_depth == 50
        assert settings.seed == 0
        assert settings.metal_absorbs_below_surface is False

    @pytest.mark.parametrize(
        "width,aspect_ratio,expected",
        [
            (400, 16.0 / 9.0, 225),
            (160, 2.0, 80),
            (100, 1.0, 100),
            (1, 16.0 / 9.0, 1),
            (3, 100.0, 1),
        ],
    )
    def test_height_is_rounded_and_at_least_one(self, width, aspect_ratio, expected):
        from raygun.core.renderer import RenderSettings

        assert RenderSettings(width=width, aspect_ratio=aspect_ratio).height == expected

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"width": 0},
            {"width": 10.5},
            {"samples_per_pixel": 0},
            {"max_depth": 0},
            {"rows_per_batch": -1},
            {"aspect_ratio": 0.0},
            {"aspect_ratio": float("nan")},
            {"seed": -1},
            {"seed": 2**32},
        ],
    )
    def test_invalid_settings_raise(self, kwargs):
        from raygun.core.renderer import RenderSettings

        with pytest.raises(ValueError):
            RenderSettings(**kwargs)

    def test_dict_round_trip(self):
        from raygun.core.renderer import RenderSettings

        settings = RenderSettings(width=64, samples_per_pixel=8, seed=99)
        assert RenderSettings.from_dict(settings.to_dict()) == settings

    def test_from_dict_partial(self):
        from raygun.core.renderer import RenderSettings

        settings = RenderSettings.from_dict({"width": 32})
        assert settings.width == 32
        assert settings.samples_per_pixel == 100

    def test_from_dict_unknown_key_raises(self):
        from raygun.core.renderer import RenderSettings

        with pytest.raises(ValueError, match="Unknown"):
            RenderSettings.from_dict({"width": 32, "gamma": 2.2})


class TestRenderer:
    """Tests for Renderer output."""

    def test_image_shape_and_range(self, default_scene):
        from raygun.core.renderer import Renderer

        _, camera = default_scene
        settings = _small_settings()
        renderer = Renderer(settings, camera)
        image = renderer.render()

        assert image.shape == (settings.height, settings.width, 3)
        assert image.dtype == np.float64
        assert np.all(np.isfinite(image))
        assert image.min() >= 0.0
        assert image.max() <= 1.0
        assert renderer.image is image

    def test_pixels_are_gamma_two_of_linear(self, default_scene):
        from raygun.core.renderer import Renderer

        _, camera = default_scene
        renderer = Renderer(_small_settings(), camera)
        renderer.render()

        expected = np.clip(np.sqrt(renderer.linear_image), 0.0, 1.0)
        assert np.allclose(renderer.image, expected)

    def test_same_seed_is_deterministic(self, default_scene):
        from raygun.core.renderer import Renderer

        _, camera = default_scene
        a = Renderer(_small_settings(seed=5), camera).render().copy()
        b = Renderer(_small_settings(seed=5), camera).render().copy()

        assert np.array_equal(a, b)

    def test_different_seeds_differ(self, default_scene):
        from raygun.core.renderer import Renderer

        _, camera = default_scene
        a = Renderer(_small_settings(seed=1), camera).render().copy()
        b = Renderer(_small_settings(seed=2), camera).render().copy()

        assert not np.array_equal(a, b)

    def test_band_size_does_not_change_image(self, default_scene):
        from raygun.core.renderer import Renderer

        _, camera = default_scene
        a = Renderer(_small_settings(rows_per_batch=1), camera).render().copy()
        b = Renderer(_small_settings(rows_per_batch=1000), camera).render().copy()

        assert np.array_equal(a, b)

    def test_empty_scene_is_sky(self):
        """Without objects every pixel is the sky; its blue channel is 1."""
        from raygun.core.renderer import Renderer
        from raygun.scene.manager import SceneManager

        SceneManager()
        renderer = Renderer(_small_settings())
        image = renderer.render()

        assert np.allclose(image[:, :, 2], 1.0)
        # Row 0 is the top of the image, which looks further up into the sky
        assert image[0, :, 0].mean() < image[-1, :, 0].mean()

    def test_empty_scene_pixels_follow_their_rays(self):
        """Each pixel holds the sky gradient along its own jittered ray."""
        from raygun.core.renderer import Renderer, RenderSettings
        from raygun.core.rng import random_real, seed_stream
        from raygun.scene.manager import SceneManager

        SceneManager()
        seed = 11
        settings = RenderSettings(
            width=5, aspect_ratio=5.0 / 3.0, samples_per_pixel=1, max_depth=3, seed=seed
        )
        width, height = settings.width, settings.height
        assert height == 3

        renderer = Renderer(settings)
        renderer.render()

        jitter = ti.field(dtype=ti.f64, shape=(height, width, 2))

        @ti.kernel
        def replay_jitter(render_seed: ti.u32):
            for j, i in ti.ndrange(height, width):
                state = seed_stream(render_seed, ti.cast(j * width + i, ti.u32))
                state, du = random_real(state)
                state, dv = random_real(state)
                jitter[j, i, 0] = du
                jitter[j, i, 1] = dv

        replay_jitter(seed)
        draws = jitter.to_numpy()

        viewport_width = 2.0 * settings.aspect_ratio
        for j in range(height):
            for i in range(width):
                du, dv = draws[j, i]
                u = (i + du) / width
                v = (height - 1 - j + dv) / height
                direction = np.array([viewport_width * (u - 0.5), 2.0 * v - 1.0, -1.0])
                s = 0.5 * (direction[1] / np.linalg.norm(direction) + 1.0)
                expected = (1.0 - s) * np.ones(3) + s * np.array([0.5, 0.7, 1.0])

                assert np.allclose(renderer.linear_image[j, i], expected, atol=1e-12)

    def test_default_camera_follows_aspect_ratio(self):
        from raygun.core.renderer import Renderer, RenderSettings

        renderer = Renderer(RenderSettings(aspect_ratio=2.0))
        assert renderer.camera.aspect_ratio == 2.0


class TestProgress:
    """Tests for progress reporting."""

    def test_callback_reports_every_band(self, default_scene):
        from raygun.core.renderer import Renderer

        _, camera = default_scene
        settings = _small_settings(rows_per_batch=4)
        calls = []
        Renderer(settings, camera).render(callback=lambda done, total: calls.append((done, total)))

        height = settings.height
        assert calls[-1] == (height, height)
        assert len(calls) == -(-height // 4)
        assert [done for done, _ in calls] == sorted(done for done, _ in calls)

    def test_render_progressive_generator(self, default_scene):
        from raygun.core.renderer import Renderer

        _, camera = default_scene
        settings = _small_settings(rows_per_batch=6)
        renderer = Renderer(settings, camera)
        steps = list(renderer.render_progressive())

        assert steps[0] == (6, settings.height)
        assert steps[-1] == (settings.height, settings.height)
        assert renderer.image.shape == (settings.height, settings.width, 3)


class TestSaveImage:
    """Tests for Renderer.save_image."""

    def test_save_before_render_raises(self):
        from raygun.core.renderer import Renderer

        with pytest.raises(RuntimeError):
            Renderer(_small_settings()).save_image("never.png")

    def test_save_png(self, default_scene, tmp_path):
        from PIL import Image as PILImage

        from raygun.core.renderer import Renderer

        _, camera = default_scene
        settings = _small_settings()
        renderer = Renderer(settings, camera)
        renderer.render()

        output_path = tmp_path / "spheres.png"
        renderer.save_image(output_path)

        with PILImage.open(output_path) as img:
            assert img.size == (settings.width, settings.height)
            assert img.mode == "RGB"
