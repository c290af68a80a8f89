"""Compute which links a library view shows.

A view is the tuple (filter, tag, search query, vault state). The filter
chain below short-circuits in a fixed order: search, trash, vault, tag,
category. The order is observable: a trashed private link shows up in
the trash view because the trash check returns before the vault check.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Mapping

FILTER_ALL = "all"
FILTER_FAVORITES = "favorites"
FILTER_ARCHIVE = "archive"
FILTER_TRASH = "trash"

PRIVATE_TAG = "private"

FILTER_BAR_TAGS = ("All", "Video", "Code", "Article", "Shopping", "Music", "Private")
SIDEBAR_TAGS = ("Video", "Code", "Article", "Shopping")

PAGE_TITLES = {
    FILTER_FAVORITES: "Favorites",
    FILTER_ARCHIVE: "Archive",
    FILTER_TRASH: "Trash",
}
DEFAULT_PAGE_TITLE = "All Links"


@dataclass(frozen=True)
class ViewSpec:
    filter: str = FILTER_ALL
    tag: str | None = None
    search_query: str = ""
    vault_unlocked: bool = False

    @classmethod
    def from_args(cls, args: Mapping, vault_unlocked: bool = False) -> "ViewSpec":
        tag = (args.get("tag") or "").strip() or None
        return cls(
            filter=(args.get("filter") or "").strip() or FILTER_ALL,
            tag=tag,
            search_query=(args.get("q") or "").strip(),
            vault_unlocked=vault_unlocked,
        )

    def without_tag(self) -> "ViewSpec":
        return replace(self, tag=None)

    def query_args(self) -> dict:
        args = {}
        if self.filter != FILTER_ALL:
            args["filter"] = self.filter
        if self.tag:
            args["tag"] = self.tag
        if self.search_query:
            args["q"] = self.search_query
        return args


def _has_tag(item, tag: str) -> bool:
    wanted = tag.lower()
    return any((name or "").lower() == wanted for name in (item.tags or []))


def is_visible(item, spec: ViewSpec) -> bool:
    if spec.search_query:
        if spec.search_query.lower() not in (item.title or "").lower():
            return False

    if spec.filter == FILTER_TRASH:
        return bool(item.is_trash)
    if item.is_trash:
        return False

    if spec.tag == PRIVATE_TAG:
        return spec.vault_unlocked and bool(item.is_private)
    if item.is_private:
        return False

    if spec.tag:
        return _has_tag(item, spec.tag)

    if spec.filter == FILTER_FAVORITES:
        return bool(item.is_favorite)
    if spec.filter == FILTER_ARCHIVE:
        return bool(item.is_archived)
    if spec.filter == FILTER_ALL and item.is_archived:
        return False
    return True


def compute_visible(items: Iterable, spec: ViewSpec) -> list:
    return [item for item in items if is_visible(item, spec)]


def requires_vault(spec: ViewSpec) -> bool:
    return spec.tag == PRIVATE_TAG and not spec.vault_unlocked


def page_title(spec: ViewSpec) -> str:
    if spec.tag:
        return f"#{spec.tag}"
    return PAGE_TITLES.get(spec.filter, DEFAULT_PAGE_TITLE)


def show_add_card(spec: ViewSpec) -> bool:
    return spec.filter == FILTER_ALL and not spec.tag and not spec.search_query
