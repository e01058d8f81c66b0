"""
TapCalc Configuration Settings
"""
import os


def _env_flag(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Application Settings
APP_NAME = "TapCalc"
VERSION = "1.0.0"

# Display Settings
WINDOW_WIDTH = 360
WINDOW_HEIGHT = 520
DISPLAY_FONT = ("Consolas", 32, "bold")   # LCD/segmented-style font
BUTTON_FONT = ("Segoe UI", 16)
LABEL_FONT = ("Segoe UI", 11)
DARK_MODE = _env_flag("TAPCALC_DARK_MODE", False)

# ── Neumorphic Palettes ────────────────────────────────────────────────────────

# LIGHT palette, soft grey-blue background
NEU_LIGHT = {
    "bg":           "#DDE6ED",   # base surface
    "bg_dark":      "#C8D4DF",   # slightly darker variant (inset feel)
    "shadow_dark":  "#B2BFC8",
    "shadow_lite":  "#FFFFFF",
    "display_bg":   "#C8D4DF",
    "display_fg":   "#1A2332",   # LCD dark on light
    "btn_bg":       "#DDE6ED",
    "btn_fg":       "#2B3A4A",
    "action_fg":    "#2C5F8A",   # C, (), %
    "operator_fg":  "#1E7A56",
    "operator_active_bg": "#B9D9C8",
    "equals_bg":    "#2E8B57",
    "equals_fg":    "#FFFFFF",
    "accent":       "#2E8B57",
    "subtext":      "#6E8090",
    "danger":       "#B03A2E",
}

# DARK palette, deep slate with green accents
NEU_DARK = {
    "bg":           "#1E2530",
    "bg_dark":      "#161C26",
    "shadow_dark":  "#10161E",
    "shadow_lite":  "#283040",
    "display_bg":   "#161C26",
    "display_fg":   "#9ADDB0",   # LCD green-on-dark
    "btn_bg":       "#1E2530",
    "btn_fg":       "#BDD0E0",
    "action_fg":    "#5E8FC8",
    "operator_fg":  "#4DB888",
    "operator_active_bg": "#24473A",
    "equals_bg":    "#2D8A58",
    "equals_fg":    "#FFFFFF",
    "accent":       "#4DB888",
    "subtext":      "#4E6070",
    "danger":       "#E55A4E",
}


def get_theme(dark: bool) -> dict:
    """Return the active neumorphic colour palette."""
    return NEU_DARK if dark else NEU_LIGHT


# Web Portal settings
WEB_HOST = os.getenv("TAPCALC_WEB_HOST", "0.0.0.0")
WEB_PORT = int(os.getenv("TAPCALC_WEB_PORT", "8888"))
START_WEB_PORTAL = _env_flag("TAPCALC_START_WEB", False)
MAX_KEYS_PER_REQUEST = 500

# Logging
LOG_LEVEL = os.getenv("TAPCALC_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
