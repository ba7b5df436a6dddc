"""Design Generators: QR codes, palettes and CSS snippets.

The whole category is premium. Generators that take a `seed` produce the same
output for the same seed so results can be reproduced and exported.
"""
from typing import Any, Dict, List
import math
import random

from reportlab.graphics import renderSVG
from reportlab.graphics.barcode.qr import QrCodeWidget
from reportlab.graphics.shapes import Drawing, Rect
from reportlab.lib import colors

from tools.registry import register
from tools.inputs import get_bool, get_choice, get_int, get_list, get_number, get_str, round_to, seeded_random
from tools.developer import hex_to_rgb, rgb_to_hex


def get_color(inputs: Dict[str, Any], key: str, default: str) -> str:
    value = get_str(inputs, key, default).strip()
    try:
        return rgb_to_hex(*hex_to_rgb(value))
    except ValueError:
        raise ValueError(f"Invalid color for {key.replace('_', ' ')}: {value}")


def rgba(hex_color: str, alpha: float) -> str:
    r, g, b = hex_to_rgb(hex_color)
    return f"rgba({r}, {g}, {b}, {_fmt(alpha)})"


def _fmt(value: float) -> str:
    """Render a number the way CSS authors write it: 10 not 10.0."""
    value = round(value, 4)
    return str(int(value)) if value == int(value) else str(value)


# ============================================================================
# QR codes
# ============================================================================

QR_ERROR_LEVELS = ("L", "M", "Q", "H")
# Byte-mode capacity of the largest symbol the encoder picks (version 39)
QR_BYTE_CAPACITY = {"L": 2809, "M": 2213, "Q": 1579, "H": 1219}


def render_qr_svg(text: str, size: int, foreground: str, background: str, level: str = "M") -> str:
    widget = QrCodeWidget(text, barLevel=level)
    widget.barFillColor = colors.HexColor(foreground)
    widget.barStrokeColor = colors.HexColor(foreground)
    x0, y0, x1, y1 = widget.getBounds()
    width, height = x1 - x0, y1 - y0

    drawing = Drawing(size, size, transform=[size / width, 0, 0, size / height, 0, 0])
    drawing.add(Rect(x0, y0, width, height, fillColor=colors.HexColor(background), strokeColor=None))
    drawing.add(widget)
    return renderSVG.drawToString(drawing)


@register("qr-generator", exports=("svg",))
def qr_generator(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    text = get_str(inputs, "text", required=True, label="text or a URL to encode")
    if len(text) > 2000:
        raise ValueError("QR content is limited to 2000 characters")
    size = get_int(inputs, "size", 256, minimum=64, maximum=1024)
    foreground = get_color(inputs, "foreground", "#000000")
    background = get_color(inputs, "background", "#ffffff")
    level = get_choice(inputs, "error_correction", QR_ERROR_LEVELS, "M")
    if len(text.encode("utf-8")) > QR_BYTE_CAPACITY[level]:
        raise ValueError(f"Text is too long for a QR code at error correction level {level}")

    return {
        "text": text,
        "size": size,
        "foreground": foreground,
        "background": background,
        "svg": render_qr_svg(text, size, foreground, background, level),
    }


# ============================================================================
# Colors & gradients
# ============================================================================

@register("color-palette-generator", exports=("json",))
def color_palette(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    count = get_int(inputs, "count", 5, minimum=1, maximum=10)
    locked = get_list(inputs, "locked")
    rng = seeded_random(inputs)

    palette = []
    for index in range(count):
        kept = locked[index] if index < len(locked) else None
        if kept:
            palette.append(rgb_to_hex(*hex_to_rgb(str(kept))))
        else:
            palette.append("#{:06x}".format(rng.randrange(0x1000000)))

    return {
        "colors": palette,
        "locked": [bool(locked[i]) if i < len(locked) else False for i in range(count)],
        "rgb": ["rgb({}, {}, {})".format(*hex_to_rgb(c)) for c in palette],
    }


@register("css-gradient-generator")
def css_gradient(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    gradient_type = get_choice(inputs, "type", ("linear", "radial"), "linear")
    angle = get_number(inputs, "angle", 90)
    stops = get_list(inputs, "stops") or [
        {"color": "#ff0000", "position": 0},
        {"color": "#0000ff", "position": 100},
    ]
    if len(stops) < 2:
        raise ValueError("A gradient needs at least two color stops")

    parsed = []
    for stop in stops:
        if not isinstance(stop, dict):
            raise ValueError("Each color stop needs a color and a position")
        position = get_number(stop, "position", label="stop position")
        if not 0 <= position <= 100:
            raise ValueError("Stop positions must be between 0 and 100")
        parsed.append({"color": get_color(stop, "color", "#000000"), "position": position})
    parsed.sort(key=lambda stop: stop["position"])

    color_stops = ", ".join(f"{stop['color']} {_fmt(stop['position'])}%" for stop in parsed)
    if gradient_type == "linear":
        gradient = f"linear-gradient({_fmt(angle)}deg, {color_stops})"
    else:
        gradient = f"radial-gradient(circle, {color_stops})"

    return {"gradient": gradient, "css": f"background-image: {gradient};", "stops": parsed}


# ============================================================================
# Surfaces
# ============================================================================

@register("glassmorphism-generator")
def glassmorphism(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    blur = get_number(inputs, "blur", 10, non_negative=True)
    transparency = get_number(inputs, "transparency", 20, non_negative=True)
    radius = get_number(inputs, "border_radius", 10, non_negative=True, label="border radius")
    color = get_color(inputs, "color", "#ffffff")
    if transparency > 100:
        raise ValueError("Transparency must be between 0 and 100")

    lines = [
        f"background: {rgba(color, transparency / 100)};",
        f"border-radius: {_fmt(radius)}px;",
        "box-shadow: 0 4px 30px rgba(0, 0, 0, 0.1);",
        f"backdrop-filter: blur({_fmt(blur)}px);",
        f"-webkit-backdrop-filter: blur({_fmt(blur)}px);",
        "border: 1px solid rgba(255, 255, 255, 0.3);",
    ]
    return {"css": "\n".join(lines)}


@register("neumorphism-generator")
def neumorphism(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    color = get_color(inputs, "color", "#e0e0e0")
    radius = get_number(inputs, "border_radius", 10, non_negative=True, label="border radius")
    distance = get_number(inputs, "distance", 10, non_negative=True)
    blur = get_number(inputs, "blur", 20, non_negative=True)
    intensity = get_number(inputs, "intensity", 0.1, non_negative=True)
    if intensity > 1:
        raise ValueError("Intensity must be between 0 and 1")

    d, b, i = _fmt(distance), _fmt(blur), _fmt(intensity)
    light = f"-{d}px -{d}px {b}px rgba(255, 255, 255, {i})"
    dark = f"{d}px {d}px {b}px rgba(0, 0, 0, {i})"
    lines = [
        f"background: {color};",
        f"border-radius: {_fmt(radius)}px;",
        f"box-shadow: {light}, {dark};",
    ]
    return {"light_shadow": light, "dark_shadow": dark, "css": "\n".join(lines)}


@register("box-shadow-generator")
def box_shadow(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    offset_x = get_number(inputs, "offset_x", 10)
    offset_y = get_number(inputs, "offset_y", 10)
    blur = get_number(inputs, "blur", 5, non_negative=True)
    spread = get_number(inputs, "spread", 0)
    color = get_color(inputs, "color", "#000000")
    opacity = get_number(inputs, "opacity", 50, non_negative=True)
    inset = get_bool(inputs, "inset", False)
    if opacity > 100:
        raise ValueError("Opacity must be between 0 and 100")

    value = "{}{}px {}px {}px {}px {}".format(
        "inset " if inset else "",
        _fmt(offset_x), _fmt(offset_y), _fmt(blur), _fmt(spread),
        rgba(color, opacity / 100),
    )
    return {"box_shadow": value, "css": f"box-shadow: {value};"}


@register("border-radius-generator")
def border_radius(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    unit = get_choice(inputs, "unit", ("px", "%", "rem", "em"), "px")
    if inputs.get("radius") not in (None, ""):
        uniform = get_number(inputs, "radius", non_negative=True)
        corners = [uniform] * 4
    else:
        corners = [
            get_number(inputs, key, 10, non_negative=True, label=key.replace("_", " "))
            for key in ("top_left", "top_right", "bottom_right", "bottom_left")
        ]

    if len(set(corners)) == 1:
        value = f"{_fmt(corners[0])}{unit}"
    else:
        value = " ".join(f"{_fmt(c)}{unit}" for c in corners)
    return {
        "corners": dict(zip(("top_left", "top_right", "bottom_right", "bottom_left"), corners)),
        "border_radius": value,
        "css": f"border-radius: {value};",
    }


@register("spacing-grid-generator")
def spacing_grid(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    width = get_number(inputs, "container_width", 1200, positive=True, label="container width")
    columns = get_int(inputs, "columns", 12, minimum=1, maximum=48)
    gutter = get_number(inputs, "gutter", 20, non_negative=True)
    padding = get_number(inputs, "padding", 15, non_negative=True)
    unit = get_choice(inputs, "unit", ("px", "rem"), "px")

    column_width = (width - (columns - 1) * gutter - 2 * padding) / columns
    if column_width <= 0:
        raise ValueError("Gutters and padding leave no room for the columns")

    css = "\n".join([
        ".container {",
        f"  width: {_fmt(width)}{unit};",
        f"  padding: 0 {_fmt(padding)}{unit};",
        "}",
        ".grid {",
        "  display: grid;",
        f"  grid-template-columns: repeat({columns}, 1fr);",
        f"  gap: {_fmt(gutter)}{unit};",
        "}",
    ])
    return {"column_width": round_to(column_width), "unit": unit, "css": css}


# ============================================================================
# Patterns & shapes
# ============================================================================

@register("pattern-generator")
def pattern_generator(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    pattern = get_choice(inputs, "pattern", ("dots", "stripes", "zigzag", "noise"), "dots")
    primary = get_color(inputs, "primary_color", "#000000")
    secondary = get_color(inputs, "secondary_color", "#ffffff")
    size = get_number(inputs, "size", 20, positive=True)
    density = get_number(inputs, "density", 50, non_negative=True)
    if density > 100:
        raise ValueError("Density must be between 0 and 100")

    s = _fmt(size)
    half = _fmt(size / 2)
    opacity = _fmt(density / 100)
    lines = [f"background-color: {secondary};"]
    if pattern == "dots":
        quarter = _fmt(size / 4)
        lines += [
            f"background-image: radial-gradient({primary} {quarter}px, transparent {quarter}px);",
            f"background-size: {s}px {s}px;",
            f"opacity: {opacity};",
        ]
    elif pattern == "stripes":
        lines += [
            f"background-image: linear-gradient(90deg, {primary} {s}px, transparent {s}px);",
            f"background-size: {_fmt(size * 2)}px 100%;",
            f"opacity: {opacity};",
        ]
    elif pattern == "zigzag":
        lines += [
            f"background-image: linear-gradient(135deg, {primary} 25%, transparent 25%), "
            f"linear-gradient(225deg, {primary} 25%, transparent 25%), "
            f"linear-gradient(45deg, {primary} 25%, transparent 25%), "
            f"linear-gradient(315deg, {primary} 25%, {secondary} 25%);",
            f"background-size: {s}px {s}px;",
            f"background-position: {half}px 0, {half}px 0, 0 0, 0 0;",
            f"opacity: {opacity};",
        ]
    else:
        svg = (
            f"%3Csvg width='{s}' height='{s}' viewBox='0 0 {s} {s}' xmlns='http://www.w3.org/2000/svg'%3E"
            "%3Cfilter id='noiseFilter'%3E%3CfeTurbulence type='fractalNoise' baseFrequency='0.75' "
            "numOctaves='3' stitchTiles='stitch'/%3E%3C/filter%3E"
            f"%3Crect width='100%25' height='100%25' filter='url(%23noiseFilter)' opacity='{opacity}'/%3E%3C/svg%3E"
        )
        lines.append(f'background-image: url("data:image/svg+xml,{svg}");')
    return {"pattern": pattern, "css": "\n".join(lines)}


def blob_path(complexity: float, contrast: float, rng: random.Random) -> str:
    num_points = math.floor(complexity * 5) + 5
    angle_step = math.pi * 2 / num_points
    min_radius = 50 - contrast * 20
    max_radius = 50 + contrast * 20

    points = []
    for i in range(num_points):
        radius = min_radius + rng.random() * (max_radius - min_radius)
        angle = i * angle_step
        points.append((round(50 + radius * math.cos(angle), 2), round(50 + radius * math.sin(angle), 2)))

    def mid(a, b):
        return round((a[0] + b[0]) / 2, 2), round((a[1] + b[1]) / 2, 2)

    parts: List[str] = [f"M {points[0][0]} {points[0][1]}"]
    for i in range(1, num_points):
        control = points[i]
        end = mid(control, points[(i + 1) % num_points])
        parts.append(f"Q {control[0]} {control[1]} {end[0]} {end[1]}")
    last = points[-1]
    end = mid(last, points[0])
    parts.append(f"Q {last[0]} {last[1]} {end[0]} {end[1]}")
    parts.append("Z")
    return " ".join(parts)


@register("blob-generator", exports=("svg",))
def blob_generator(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    complexity = get_number(inputs, "complexity", 0.5, non_negative=True)
    contrast = get_number(inputs, "contrast", 0.5, non_negative=True)
    if complexity > 1 or contrast > 1:
        raise ValueError("Complexity and contrast must be between 0 and 1")
    color = get_color(inputs, "color", "#3b82f6")

    path = blob_path(complexity, contrast, seeded_random(inputs))
    svg = (
        '<svg viewBox="0 0 100 100" xmlns="http://www.w3.org/2000/svg">'
        f'<path d="{path}" fill="{color}"/></svg>'
    )
    return {"path": path, "points": math.floor(complexity * 5) + 5, "svg": svg}
