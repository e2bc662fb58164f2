"""Deterministic entity-type coloring.

Color is a pure function of the entity type: well-known types use a fixed
palette, anything else hashes to a stable hue so reloads never reshuffle
the legend.
"""

import colorsys
import hashlib

ENTITY_TYPE_COLORS: dict[str, str] = {
    "module": "#3498db",
    "class": "#e74c3c",
    "function": "#2ecc71",
    "method": "#27ae60",
    "service": "#f39c12",
    "person": "#9b59b6",
    "concept": "#1abc9c",
    "document": "#34495e",
    "file": "#7f8c8d",
    "variable": "#e67e22",
    "interface": "#16a085",
    "component": "#2980b9",
    "api": "#8e44ad",
    "database": "#c0392b",
    "config": "#d35400",
    "project": "#2c3e50",
    "technology": "#00b894",
}

# HSL used for hashed colors
_SATURATION = 0.65
_LIGHTNESS = 0.55


def hsl_to_hex(hue: int, saturation: float, lightness: float) -> str:
    """Convert HSL (hue in degrees, s/l in 0..1) to a #RRGGBB string."""
    r, g, b = colorsys.hls_to_rgb(hue / 360.0, lightness, saturation)
    return "#{:02X}{:02X}{:02X}".format(int(r * 255), int(g * 255), int(b * 255))


def color_for_entity_type(entity_type: str) -> str:
    """Get the display color for an entity type (case-insensitive)."""
    key = (entity_type or "").lower()
    if key in ENTITY_TYPE_COLORS:
        return ENTITY_TYPE_COLORS[key]

    # md5 rather than hash(): str hashing is salted per process
    digest = hashlib.md5(key.encode("utf-8")).hexdigest()
    hue = int(digest[:8], 16) % 360
    return hsl_to_hex(hue, _SATURATION, _LIGHTNESS)


def node_size_for(observation_count: int) -> int:
    """Node size grows with observation count: base 30, capped at 60."""
    return min(30 + observation_count * 3, 60)
