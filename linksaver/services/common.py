def to_bool(value, default=False):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def looks_like_url(value: str | None) -> bool:
    return (value or "").strip().startswith("http")
