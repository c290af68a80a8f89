from __future__ import annotations

from flask import current_app, g, jsonify, request

from linksaver.api import api_bp
from linksaver.extensions import db
from linksaver.models import ApiToken, User
from linksaver.services.common import looks_like_url, to_bool
from linksaver.services.metadata import PreviewData, fetch_preview
from linksaver.services.security import api_auth_required
from linksaver.services.store import (
    PersistenceError,
    changes_since,
    create_link,
    delete_link,
    empty_trash,
    get_link,
    latest_cursor,
    snapshot,
    update_link,
)
from linksaver.services.vault_session import (
    cancel_vault,
    lock_vault,
    open_vault,
    poll_vault,
    vault_unlocked,
)
from linksaver.services.views import ViewSpec, compute_visible, page_title

PATCH_FIELDS = {
    "title": "title",
    "description": "description",
    "tags": "tags",
    "isFavorite": "is_favorite",
    "isArchived": "is_archived",
    "isTrash": "is_trash",
    "isPrivate": "is_private",
}

TOGGLE_FIELDS = {
    "favorite": "is_favorite",
    "archive": "is_archived",
    "private": "is_private",
}

CHANGES_PAGE_SIZE = 200


def _fetch_preview(url: str) -> PreviewData:
    return fetch_preview(
        url,
        api_url=current_app.config["METADATA_API_URL"],
        timeout=current_app.config["METADATA_FETCH_TIMEOUT"],
        transport=current_app.config.get("METADATA_TRANSPORT"),
    )


def _persistence_error(exc: PersistenceError):
    current_app.logger.warning("Persistence failure: %s", exc)
    return jsonify({"error": str(exc)}), 503


def _get_user_link_or_404(user_id: int, link_id: int):
    link = get_link(user_id, link_id)
    if not link:
        return None, (jsonify({"error": "link not found"}), 404)
    return link, None


@api_bp.route("/health")
def health():
    return jsonify({"status": "ok", "service": "LinkSaver"})


@api_bp.route("/auth/token", methods=["POST"])
def create_token_with_credentials():
    payload = request.get_json(silent=True) or {}
    username = (payload.get("username") or "").strip()
    password = payload.get("password") or ""
    token_name = (payload.get("token_name") or "LinkSaver API Token").strip()

    user = User.query.filter_by(username=username).first()
    if not user or not user.is_active or not user.check_password(password):
        return jsonify({"error": "invalid credentials"}), 401

    token, token_hash = ApiToken.issue_token()
    row = ApiToken(user_id=user.id, name=token_name, token_hash=token_hash)
    db.session.add(row)
    db.session.commit()
    return jsonify({"token": token, "token_name": token_name, "user_id": user.id})


@api_bp.route("/me")
@api_auth_required()
def me():
    return jsonify(g.api_user.identity())


@api_bp.route("/admin/users", methods=["POST"])
@api_auth_required(admin=True)
def admin_create_user():
    payload = request.get_json(silent=True) or {}
    username = (payload.get("username") or "").strip()
    password = payload.get("password") or ""
    is_admin = to_bool(payload.get("is_admin"), default=False)

    if not username or not password:
        return jsonify({"error": "username and password are required"}), 400
    if User.query.filter_by(username=username).first():
        return jsonify({"error": "username already exists"}), 409

    user = User(
        username=username,
        display_name=(payload.get("display_name") or "").strip() or None,
        photo_url=(payload.get("photo_url") or "").strip() or None,
        is_admin=is_admin,
        is_active=True,
    )
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return jsonify({"status": "created", "user_id": user.id}), 201


@api_bp.route("/preview", methods=["POST"])
@api_auth_required()
def preview():
    payload = request.get_json(silent=True) or {}
    url = (payload.get("url") or "").strip()
    if not looks_like_url(url):
        return jsonify({"error": "url must start with http"}), 400
    return jsonify(_fetch_preview(url).as_dict())


@api_bp.route("/links", methods=["GET"])
@api_auth_required()
def links_visible():
    user = g.api_user
    spec = ViewSpec.from_args(request.args, vault_unlocked=vault_unlocked())
    items = compute_visible(snapshot(user.id), spec)
    return jsonify(
        {
            "title": page_title(spec),
            "count": len(items),
            "items": [item.as_dict() for item in items],
        }
    )


@api_bp.route("/links/snapshot", methods=["GET"])
@api_auth_required()
def links_snapshot():
    user = g.api_user
    cursor = latest_cursor(user.id)
    items = snapshot(user.id)
    return jsonify({"cursor": cursor, "items": [item.as_dict() for item in items]})


@api_bp.route("/links/changes", methods=["GET"])
@api_auth_required()
def links_changes():
    user = g.api_user
    since = request.args.get("since", default=0, type=int)
    limit = request.args.get("limit", default=CHANGES_PAGE_SIZE, type=int)
    limit = max(1, min(limit, CHANGES_PAGE_SIZE))
    events = changes_since(user.id, since, limit=limit)
    cursor = events[-1].id if events else since
    return jsonify(
        {
            "changed": bool(events),
            "cursor": cursor,
            "has_more": len(events) == limit,
            "events": [event.as_dict() for event in events],
        }
    )


@api_bp.route("/links", methods=["POST"])
@api_auth_required()
def links_create():
    user = g.api_user
    payload = request.get_json(silent=True) or {}
    url = (payload.get("url") or "").strip()
    if not looks_like_url(url):
        return jsonify({"error": "url must start with http"}), 400

    preview_payload = payload.get("preview")
    if isinstance(preview_payload, dict):
        preview_data = PreviewData.from_dict(preview_payload, url)
    else:
        preview_data = _fetch_preview(url)

    try:
        link = create_link(user.id, url, preview_data)
    except PersistenceError as exc:
        return _persistence_error(exc)
    return jsonify(link.as_dict()), 201


@api_bp.route("/links/<int:link_id>", methods=["GET"])
@api_auth_required()
def links_get(link_id: int):
    link, error = _get_user_link_or_404(g.api_user.id, link_id)
    if error:
        return error
    return jsonify(link.as_dict())


@api_bp.route("/links/<int:link_id>", methods=["PATCH"])
@api_auth_required()
def links_update(link_id: int):
    link, error = _get_user_link_or_404(g.api_user.id, link_id)
    if error:
        return error

    payload = request.get_json(silent=True) or {}
    fields = {
        column: payload[key] for key, column in PATCH_FIELDS.items() if key in payload
    }
    if "tags" in fields and not isinstance(fields["tags"], list):
        return jsonify({"error": "tags must be a list"}), 400
    if "title" in fields:
        if fields["title"] is not None and not isinstance(fields["title"], str):
            return jsonify({"error": "title must be a string"}), 400
        fields["title"] = (fields["title"] or "").strip() or link.title
    if not fields:
        return jsonify(link.as_dict())

    try:
        update_link(link, **fields)
    except PersistenceError as exc:
        return _persistence_error(exc)
    return jsonify(link.as_dict())


@api_bp.route("/links/<int:link_id>", methods=["DELETE"])
@api_auth_required()
def links_delete(link_id: int):
    link, error = _get_user_link_or_404(g.api_user.id, link_id)
    if error:
        return error
    if not link.is_trash:
        return jsonify({"error": "move the link to trash before deleting it"}), 409

    try:
        delete_link(link)
    except PersistenceError as exc:
        return _persistence_error(exc)
    return jsonify({"status": "deleted"})


@api_bp.route("/links/<int:link_id>/trash", methods=["POST"])
@api_auth_required()
def links_trash(link_id: int):
    link, error = _get_user_link_or_404(g.api_user.id, link_id)
    if error:
        return error
    try:
        update_link(link, is_trash=True)
    except PersistenceError as exc:
        return _persistence_error(exc)
    return jsonify({"status": "trashed", "link": link.as_dict()})


@api_bp.route("/links/<int:link_id>/restore", methods=["POST"])
@api_auth_required()
def links_restore(link_id: int):
    link, error = _get_user_link_or_404(g.api_user.id, link_id)
    if error:
        return error
    try:
        update_link(link, is_trash=False)
    except PersistenceError as exc:
        return _persistence_error(exc)
    return jsonify({"status": "restored", "link": link.as_dict()})


@api_bp.route("/links/<int:link_id>/<action>", methods=["POST"])
@api_auth_required()
def links_toggle(link_id: int, action: str):
    column = TOGGLE_FIELDS.get(action)
    if not column:
        return jsonify({"error": f"unknown action {action!r}"}), 404
    link, error = _get_user_link_or_404(g.api_user.id, link_id)
    if error:
        return error
    try:
        update_link(link, **{column: not getattr(link, column)})
    except PersistenceError as exc:
        return _persistence_error(exc)
    return jsonify(link.as_dict())


@api_bp.route("/trash/empty", methods=["POST"])
@api_auth_required()
def trash_empty():
    try:
        purged = empty_trash(g.api_user.id)
    except PersistenceError as exc:
        return _persistence_error(exc)
    return jsonify({"status": "emptied", "purged": purged})


def _vault_payload(status: str):
    return jsonify({"status": status, "unlocked": vault_unlocked()})


@api_bp.route("/vault", methods=["GET"])
@api_auth_required()
def vault_status():
    return _vault_payload(poll_vault())


@api_bp.route("/vault/open", methods=["POST"])
@api_auth_required()
def vault_open():
    return _vault_payload(open_vault())


@api_bp.route("/vault/cancel", methods=["POST"])
@api_auth_required()
def vault_cancel():
    return _vault_payload(cancel_vault())


@api_bp.route("/vault/lock", methods=["POST"])
@api_auth_required()
def vault_lock():
    lock_vault()
    return _vault_payload(poll_vault())
