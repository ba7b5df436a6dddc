"""
Design Generators.
"""
import pytest

from tools.design import (
    blob_generator,
    border_radius,
    box_shadow,
    color_palette,
    css_gradient,
    glassmorphism,
    neumorphism,
    pattern_generator,
    qr_generator,
    spacing_grid,
)


class TestQrCode:
    def test_svg_output(self):
        result = qr_generator({"text": "https://example.com", "foreground": "#112233"})

        assert "<svg" in result["svg"]
        assert result["foreground"] == "#112233"
        assert result["background"] == "#ffffff"
        assert result["size"] == 256

    def test_bad_color(self):
        with pytest.raises(ValueError, match="Invalid color for foreground"):
            qr_generator({"text": "hi", "foreground": "blue"})

    def test_content_limit(self):
        with pytest.raises(ValueError, match="2000 characters"):
            qr_generator({"text": "x" * 2001})

    def test_capacity_depends_on_error_correction(self):
        with pytest.raises(ValueError, match="too long for a QR code at error correction level H"):
            qr_generator({"text": "x" * 1500, "error_correction": "H"})

        result = qr_generator({"text": "x" * 1500, "error_correction": "L"})
        assert "<svg" in result["svg"]

    def test_capacity_counts_encoded_bytes(self):
        # Three UTF-8 bytes per character
        with pytest.raises(ValueError, match="level M"):
            qr_generator({"text": "\u20ac" * 800})


class TestColors:
    def test_seeded_palette_is_repeatable(self):
        first = color_palette({"seed": 7})
        second = color_palette({"seed": 7})

        assert first == second
        assert len(first["colors"]) == 5
        assert all(c.startswith("#") and len(c) == 7 for c in first["colors"])

    def test_text_seed_is_repeatable(self):
        assert color_palette({"seed": "brand"}) == color_palette({"seed": "brand"})

    @pytest.mark.parametrize("seed", [{"a": 1}, [1, 2], 1.5, True])
    def test_unusable_seed_is_rejected(self, seed):
        with pytest.raises(ValueError, match="Seed must be a whole number or text"):
            color_palette({"seed": seed})

    def test_locked_colors_are_kept(self):
        result = color_palette({"count": 5, "locked": ["#FF0000", None, "abc"], "seed": 1})

        assert result["colors"][0] == "#ff0000"
        assert result["colors"][2] == "#aabbcc"
        assert result["locked"] == [True, False, True, False, False]
        assert result["rgb"][0] == "rgb(255, 0, 0)"

    def test_default_gradient(self):
        result = css_gradient({})
        assert result["css"] == "background-image: linear-gradient(90deg, #ff0000 0%, #0000ff 100%);"

    def test_radial_gradient_sorts_stops(self):
        result = css_gradient({
            "type": "radial",
            "stops": [{"color": "#00f", "position": 100}, {"color": "#F00", "position": 0}],
        })
        assert result["gradient"] == "radial-gradient(circle, #ff0000 0%, #0000ff 100%)"

    @pytest.mark.parametrize("stops,message", [
        ([{"color": "#fff", "position": 0}], "at least two"),
        ([{"color": "#fff", "position": 0}, {"color": "#000", "position": 120}], "between 0 and 100"),
    ])
    def test_invalid_stops(self, stops, message):
        with pytest.raises(ValueError, match=message):
            css_gradient({"stops": stops})


class TestSurfaces:
    def test_glassmorphism_defaults(self):
        css = glassmorphism({})["css"].splitlines()

        assert css[0] == "background: rgba(255, 255, 255, 0.2);"
        assert css[1] == "border-radius: 10px;"
        assert "backdrop-filter: blur(10px);" in css

    def test_neumorphism_shadows(self):
        result = neumorphism({})

        assert result["light_shadow"] == "-10px -10px 20px rgba(255, 255, 255, 0.1)"
        assert result["dark_shadow"] == "10px 10px 20px rgba(0, 0, 0, 0.1)"

    def test_box_shadow(self):
        assert box_shadow({})["box_shadow"] == "10px 10px 5px 0px rgba(0, 0, 0, 0.5)"
        assert box_shadow({"inset": True, "opacity": 100})["box_shadow"] == "inset 10px 10px 5px 0px rgba(0, 0, 0, 1)"

    def test_box_shadow_opacity_bound(self):
        with pytest.raises(ValueError, match="Opacity must be between 0 and 100"):
            box_shadow({"opacity": 150})

    def test_border_radius(self):
        assert border_radius({"radius": 8, "unit": "rem"})["css"] == "border-radius: 8rem;"
        assert border_radius({"top_left": 5})["border_radius"] == "5px 10px 10px 10px"

    def test_spacing_grid(self):
        result = spacing_grid({})

        assert result["column_width"] == 79.17
        assert "grid-template-columns: repeat(12, 1fr);" in result["css"]

    def test_spacing_grid_without_room(self):
        with pytest.raises(ValueError, match="no room"):
            spacing_grid({"container_width": 100, "columns": 12, "gutter": 20})


class TestPatternsAndShapes:
    def test_dots(self):
        css = pattern_generator({"pattern": "dots", "size": 20})["css"]
        assert "radial-gradient(#000000 5px, transparent 5px)" in css
        assert "opacity: 0.5;" in css

    def test_noise_uses_svg_filter(self):
        assert "feTurbulence" in pattern_generator({"pattern": "noise"})["css"]

    def test_seeded_blob(self):
        first = blob_generator({"seed": 1})
        second = blob_generator({"seed": 1})

        assert first["path"] == second["path"]
        assert first["points"] == 7
        assert first["path"].startswith("M ")
        assert first["path"].endswith("Z")
        assert first["path"].count("Q ") == 7
        assert 'fill="#3b82f6"' in first["svg"]

    def test_blob_bounds(self):
        with pytest.raises(ValueError, match="between 0 and 1"):
            blob_generator({"complexity": 2})
