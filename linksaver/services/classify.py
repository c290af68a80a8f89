from __future__ import annotations

DEFAULT_TAG = "Web"

# Rules are checked independently, so one URL can collect several tags.
TAG_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("youtube", "vimeo"), "Video"),
    (("github", "stackoverflow"), "Code"),
    (("amazon", "ebay"), "Shopping"),
    (("medium", "dev.to"), "Article"),
    (("spotify", "music"), "Music"),
)


def classify(url: str | None) -> list[str]:
    lowered = (url or "").lower()
    tags = [
        tag
        for needles, tag in TAG_RULES
        if any(needle in lowered for needle in needles)
    ]
    return tags or [DEFAULT_TAG]
