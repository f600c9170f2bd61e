"""Theme colors and color utilities for the UI."""


class PassageColors:
    """Light theme palette for the passage view and stats panel."""

    BG = "#f5f7fa"
    CARD_BG = "#ffffff"
    CARD_BORDER = "#dde3ea"

    PRIMARY = "#2563eb"
    PRIMARY_LIGHT = "#93c5fd"

    TEXT_PRIMARY = "#111827"
    TEXT_MUTED = "#6b7280"

    CORRECT = "#16a34a"
    CORRECT_BG = "#dcfce7"
    WRONG = "#dc2626"
    WRONG_BG = "#fee2e2"
    CURRENT = "#1e3a8a"
    CURRENT_BG = "#bfdbfe"
    PENDING = "#9ca3af"

    # Timer label fades from calm to urgent as time runs out
    TIMER_CALM = "#2563eb"
    TIMER_URGENT = "#dc2626"


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b."""
    a = a.strip()
    b = b.strip()
    if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
        return a
    try:
        ar, ag, ab = int(a[1:3], 16), int(a[3:5], 16), int(a[5:7], 16)
        br, bg, bb = int(b[1:3], 16), int(b[3:5], 16), int(b[5:7], 16)
    except ValueError:
        return a
    t = max(0.0, min(1.0, float(t)))
    r = int(ar + (br - ar) * t)
    g = int(ag + (bg - ag) * t)
    bl = int(ab + (bb - ab) * t)
    return f"#{r:02X}{g:02X}{bl:02X}"


def timer_color(remaining: int, total: int) -> str:
    """Color for the countdown label given the seconds left."""
    if total <= 0:
        return PassageColors.TIMER_URGENT
    return blend_hex(PassageColors.TIMER_CALM, PassageColors.TIMER_URGENT, 1.0 - remaining / total)
