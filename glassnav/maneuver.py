"""Maneuver code to display glyph mapping."""

DEFAULT_GLYPH = "·"

MANEUVER_GLYPHS = {
    1: "↑",
    9: "↑",
    2: "↗",
    13: "↗",
    3: "→",
    4: "↘",
    5: "↶",
    6: "↙",
    7: "←",
    8: "↖",
    10: "⟳",
    11: "⟳",
    12: "🏁",
}


def maneuver_to_arrow(maneuver_type) -> str:
    """Map a routing maneuver code to a single glyph, "·" when unknown"""
    if isinstance(maneuver_type, bool) or not isinstance(maneuver_type, int):
        return DEFAULT_GLYPH
    return MANEUVER_GLYPHS.get(maneuver_type, DEFAULT_GLYPH)
