from itertools import product
from types import SimpleNamespace

import pytest

from linksaver.services.views import (
    ViewSpec,
    compute_visible,
    page_title,
    requires_vault,
    show_add_card,
)

FILTERS = ["all", "favorites", "archive", "trash"]


def _link(
    link_id,
    title="Link",
    tags=None,
    is_favorite=False,
    is_archived=False,
    is_trash=False,
    is_private=False,
):
    return SimpleNamespace(
        id=link_id,
        title=title,
        tags=tags or ["Web"],
        is_favorite=is_favorite,
        is_archived=is_archived,
        is_trash=is_trash,
        is_private=is_private,
    )


def _every_flag_combination():
    rows = []
    for index, flags in enumerate(product([False, True], repeat=4)):
        favorite, archived, trash, private = flags
        rows.append(
            _link(
                index,
                title=f"Item {index}",
                is_favorite=favorite,
                is_archived=archived,
                is_trash=trash,
                is_private=private,
            )
        )
    return rows


def _ids(items):
    return [item.id for item in items]


def test_all_view_hides_archived_items():
    items = [
        _link(1, is_archived=True),
        _link(2, is_favorite=True),
    ]

    visible = compute_visible(items, ViewSpec(filter="all"))

    assert _ids(visible) == [2]


@pytest.mark.parametrize("tag", [None, "web", "private"])
@pytest.mark.parametrize("vault_unlocked", [False, True])
def test_trash_view_shows_exactly_trashed_items(tag, vault_unlocked):
    items = _every_flag_combination()
    spec = ViewSpec(filter="trash", tag=tag, vault_unlocked=vault_unlocked)

    visible = compute_visible(items, spec)

    assert _ids(visible) == [item.id for item in items if item.is_trash]


def test_trashed_private_item_shows_in_trash_view():
    # The trash check runs before the vault check, so the private flag is ignored.
    item = _link(1, is_trash=True, is_private=True)

    assert compute_visible([item], ViewSpec(filter="trash")) == [item]


@pytest.mark.parametrize("filter_name", FILTERS[:3] + ["notes"])
@pytest.mark.parametrize("tag", [None, "web", "video"])
def test_private_items_hidden_outside_vault(filter_name, tag):
    item = _link(1, is_private=True, is_favorite=True, is_archived=True)
    spec = ViewSpec(filter=filter_name, tag=tag, vault_unlocked=True)

    assert compute_visible([item], spec) == []


def test_vault_view_requires_unlock():
    item = _link(1, is_private=True)
    locked = ViewSpec(filter="all", tag="private", vault_unlocked=False)
    unlocked = ViewSpec(filter="all", tag="private", vault_unlocked=True)

    assert compute_visible([item], locked) == []
    assert compute_visible([item], unlocked) == [item]


def test_vault_view_excludes_public_and_trashed_items():
    items = [
        _link(1, is_private=True),
        _link(2),
        _link(3, is_private=True, is_trash=True),
        _link(4, is_private=True, is_archived=True),
    ]
    spec = ViewSpec(tag="private", vault_unlocked=True)

    assert _ids(compute_visible(items, spec)) == [1, 4]


def test_tag_filter_is_case_insensitive_and_skips_category():
    items = [
        _link(1, tags=["Video"]),
        _link(2, tags=["Code", "Video"], is_archived=True),
        _link(3, tags=["Code"]),
    ]

    visible = compute_visible(items, ViewSpec(filter="all", tag="video"))

    assert _ids(visible) == [1, 2]


def test_favorites_and_archive_filters():
    items = [
        _link(1, is_favorite=True),
        _link(2, is_archived=True),
        _link(3, is_favorite=True, is_archived=True),
        _link(4),
    ]

    assert _ids(compute_visible(items, ViewSpec(filter="favorites"))) == [1, 3]
    assert _ids(compute_visible(items, ViewSpec(filter="archive"))) == [2, 3]


def test_unknown_filter_accepts_archived_items():
    items = [_link(1, is_archived=True), _link(2)]

    assert _ids(compute_visible(items, ViewSpec(filter="reminders"))) == [1, 2]


def test_search_matches_title_case_insensitively():
    items = [
        _link(1, title="Python Docs"),
        _link(2, title="Gardening tips"),
        _link(3, title="python weekly", is_trash=True),
    ]

    assert _ids(compute_visible(items, ViewSpec(search_query="PYTHON"))) == [1]
    assert _ids(
        compute_visible(items, ViewSpec(filter="trash", search_query="python"))
    ) == [3]


def test_visible_order_follows_input_order():
    items = [_link(5), _link(3), _link(9)]

    assert _ids(compute_visible(items, ViewSpec())) == [5, 3, 9]


@pytest.mark.parametrize("filter_name", FILTERS)
@pytest.mark.parametrize("tag", [None, "web", "private"])
@pytest.mark.parametrize("vault_unlocked", [False, True])
def test_filtering_twice_is_a_no_op(filter_name, tag, vault_unlocked):
    items = _every_flag_combination()
    spec = ViewSpec(filter=filter_name, tag=tag, vault_unlocked=vault_unlocked)

    once = compute_visible(items, spec)

    assert compute_visible(once, spec) == once


def test_view_spec_from_args_defaults():
    spec = ViewSpec.from_args({"q": "  flask ", "tag": " "}, vault_unlocked=True)

    assert spec == ViewSpec(
        filter="all", tag=None, search_query="flask", vault_unlocked=True
    )
    assert spec.query_args() == {"q": "flask"}


def test_page_title_and_add_card():
    assert page_title(ViewSpec()) == "All Links"
    assert page_title(ViewSpec(filter="trash")) == "Trash"
    assert page_title(ViewSpec(filter="favorites", tag="code")) == "#code"
    assert show_add_card(ViewSpec())
    assert not show_add_card(ViewSpec(search_query="x"))
    assert not show_add_card(ViewSpec(tag="video"))
    assert not show_add_card(ViewSpec(filter="archive"))


def test_requires_vault_only_for_locked_private_tag():
    assert requires_vault(ViewSpec(tag="private"))
    assert not requires_vault(ViewSpec(tag="private", vault_unlocked=True))
    assert not requires_vault(ViewSpec(tag="video"))
