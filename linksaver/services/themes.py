"""Visual theme bundles keyed off a link's domain."""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class ThemeStyles:
    name: str
    background: str
    text: str
    description: str
    border: str
    accent: str
    icon_bg: str

    def as_dict(self) -> dict:
        payload = asdict(self)
        payload["iconBg"] = payload.pop("icon_bg")
        return payload


RED = ThemeStyles(
    name="red",
    background="bg-red-50 dark:bg-red-950/40",
    text="text-red-950 dark:text-red-50",
    description="text-red-900/70 dark:text-red-200/70",
    border="border-red-100 dark:border-red-900/50",
    accent="text-red-600 dark:text-red-400",
    icon_bg="bg-red-100 dark:bg-red-900/60",
)

GREEN = ThemeStyles(
    name="green",
    background="bg-green-50 dark:bg-green-950/40",
    text="text-green-950 dark:text-green-50",
    description="text-green-900/70 dark:text-green-200/70",
    border="border-green-100 dark:border-green-900/50",
    accent="text-green-600 dark:text-green-400",
    icon_bg="bg-green-100 dark:bg-green-900/60",
)

SLATE = ThemeStyles(
    name="slate",
    background="bg-slate-50 dark:bg-slate-900/60",
    text="text-slate-950 dark:text-slate-50",
    description="text-slate-700/70 dark:text-slate-300/70",
    border="border-slate-200 dark:border-slate-700/50",
    accent="text-slate-700 dark:text-slate-300",
    icon_bg="bg-slate-200 dark:bg-slate-800",
)

ORANGE = ThemeStyles(
    name="orange",
    background="bg-orange-50 dark:bg-orange-950/40",
    text="text-orange-950 dark:text-orange-50",
    description="text-orange-900/70 dark:text-orange-200/70",
    border="border-orange-100 dark:border-orange-900/50",
    accent="text-orange-600 dark:text-orange-400",
    icon_bg="bg-orange-100 dark:bg-orange-900/60",
)

BLUE = ThemeStyles(
    name="blue",
    background="bg-white dark:bg-zinc-900",
    text="text-slate-900 dark:text-slate-100",
    description="text-slate-500 dark:text-slate-400",
    border="border-slate-100 dark:border-zinc-800",
    accent="text-blue-500 dark:text-blue-400",
    icon_bg="bg-blue-50 dark:bg-blue-900/30",
)

DEFAULT_THEME = BLUE

# Order matters: the first family whose substrings match wins.
THEME_RULES: tuple[tuple[tuple[str, ...], ThemeStyles], ...] = (
    (("youtube", "netflix", "cnn"), RED),
    (("spotify", "medium", "whatsapp"), GREEN),
    (("github", "stackoverflow", "vercel"), SLATE),
    (("amazon", "etsy"), ORANGE),
)

THEMES = {theme.name: theme for theme in (RED, GREEN, SLATE, ORANGE, BLUE)}


def resolve_theme(domain: str | None) -> ThemeStyles:
    lowered = (domain or "").lower()
    for needles, theme in THEME_RULES:
        if any(needle in lowered for needle in needles):
            return theme
    return DEFAULT_THEME
