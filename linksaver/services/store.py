from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from linksaver.extensions import db
from linksaver.models import ChangeEvent, Link
from linksaver.services.common import to_bool
from linksaver.services.metadata import PreviewData


logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    "title",
    "description",
    "tags",
    "is_favorite",
    "is_archived",
    "is_trash",
    "is_private",
}


class PersistenceError(Exception):
    """A write against the link store was rejected."""


def _commit(user_id: int, action: str) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.warning("Link store %s failed for user %s: %s", action, user_id, exc)
        raise PersistenceError(f"could not {action} link") from exc


def log_change(user_id: int, link_id: int | None, action: str, payload: dict):
    event = ChangeEvent(
        user_id=user_id,
        link_id=link_id,
        action=action,
        payload=payload,
    )
    db.session.add(event)


def create_link(user_id: int, url: str, preview: PreviewData) -> Link:
    link = Link(
        user_id=user_id,
        kind="link",
        url=url,
        title=preview.title,
        domain=preview.domain,
        image=preview.image,
        icon=preview.icon,
        description=preview.description,
        tags=list(preview.tags),
        is_favorite=False,
        is_archived=False,
        is_trash=False,
        is_private=False,
    )
    try:
        db.session.add(link)
        db.session.flush()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.warning("Link store create failed for user %s: %s", user_id, exc)
        raise PersistenceError("could not create link") from exc
    log_change(user_id, link.id, "create", link.as_dict())
    _commit(user_id, "create")
    return link


def update_link(link: Link, **fields) -> Link:
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"fields not updatable: {', '.join(sorted(unknown))}")

    for name, value in fields.items():
        if name == "tags":
            value = [str(tag) for tag in (value or [])]
        elif name.startswith("is_"):
            value = to_bool(value)
        setattr(link, name, value)
    log_change(link.user_id, link.id, "update", link.as_dict())
    _commit(link.user_id, "update")
    return link


def delete_link(link: Link) -> None:
    user_id = link.user_id
    link_id = link.id
    db.session.delete(link)
    log_change(user_id, link_id, "delete", {"id": link_id})
    _commit(user_id, "delete")


def empty_trash(user_id: int) -> int:
    items = Link.query.filter_by(user_id=user_id, is_trash=True).all()
    for item in items:
        db.session.delete(item)
        log_change(user_id, item.id, "delete", {"id": item.id})
    _commit(user_id, "purge")
    return len(items)


def get_link(user_id: int, link_id: int) -> Link | None:
    return Link.query.filter_by(id=link_id, user_id=user_id).first()


def snapshot(user_id: int) -> list[Link]:
    return (
        Link.query.filter_by(user_id=user_id)
        .order_by(Link.created_at.desc(), Link.id.desc())
        .all()
    )


def latest_cursor(user_id: int) -> int:
    event = (
        ChangeEvent.query.filter_by(user_id=user_id)
        .order_by(ChangeEvent.id.desc())
        .first()
    )
    return event.id if event else 0


def changes_since(user_id: int, cursor: int, limit: int = 200) -> list[ChangeEvent]:
    return (
        ChangeEvent.query.filter_by(user_id=user_id)
        .filter(ChangeEvent.id > cursor)
        .order_by(ChangeEvent.id.asc())
        .limit(limit)
        .all()
    )
