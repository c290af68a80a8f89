from __future__ import annotations

from flask import (
    abort,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    session,
    url_for,
)
from flask_login import current_user, login_required

from linksaver.models import User
from linksaver.services.common import looks_like_url
from linksaver.services.metadata import PreviewData, fetch_preview
from linksaver.services.store import (
    PersistenceError,
    create_link,
    delete_link,
    empty_trash,
    get_link,
    snapshot,
    update_link,
)
from linksaver.services.vault import VAULT_IDLE
from linksaver.services.vault_session import (
    cancel_vault,
    lock_vault,
    open_vault,
    poll_vault,
    vault_unlocked,
)
from linksaver.services.views import (
    PRIVATE_TAG,
    ViewSpec,
    compute_visible,
    page_title,
    requires_vault,
    show_add_card,
)
from linksaver.web import web_bp

PENDING_PREVIEW_KEY = "pending_preview"

TOGGLES = {
    "favorite": "is_favorite",
    "archive": "is_archived",
    "private": "is_private",
}


def _safe_redirect_target(raw_next: str | None, fallback: str) -> str:
    candidate = (raw_next or "").strip()
    if candidate.startswith("/") and not candidate.startswith("//"):
        return candidate
    return fallback


def _back(fallback: str | None = None):
    return redirect(
        _safe_redirect_target(
            request.form.get("next") or request.args.get("next"),
            fallback or url_for("web.library"),
        )
    )


def _fetch_preview(url: str) -> PreviewData:
    return fetch_preview(
        url,
        api_url=current_app.config["METADATA_API_URL"],
        timeout=current_app.config["METADATA_FETCH_TIMEOUT"],
        transport=current_app.config.get("METADATA_TRANSPORT"),
    )


def _current_spec() -> ViewSpec:
    return ViewSpec.from_args(request.args, vault_unlocked=vault_unlocked())


@web_bp.before_app_request
def first_run_gate():
    endpoint = request.endpoint or ""
    allowed = {"static", "auth.bootstrap_admin", "auth.login"}
    if endpoint.startswith("api."):
        return None
    if User.query.count() == 0 and endpoint not in allowed:
        return redirect(url_for("auth.bootstrap_admin"))


@web_bp.route("/")
@login_required
def library():
    spec = _current_spec()
    if requires_vault(spec):
        return redirect(url_for("web.vault", **spec.query_args()))

    items = compute_visible(snapshot(current_user.id), spec)
    return render_template(
        "library.html",
        items=items,
        spec=spec,
        title=page_title(spec),
        show_add_card=show_add_card(spec),
    )


@web_bp.route("/links/new", methods=["GET", "POST"])
@login_required
def links_new():
    if request.method == "GET":
        session.pop(PENDING_PREVIEW_KEY, None)
        return render_template("link_form.html", url="", preview=None)

    url = (request.form.get("url") or "").strip()
    action = request.form.get("action") or "preview"

    if action == "close":
        session.pop(PENDING_PREVIEW_KEY, None)
        return redirect(url_for("web.library"))

    if not looks_like_url(url):
        flash("Paste a URL starting with http.", "error")
        return render_template("link_form.html", url=url, preview=None)

    if action == "save":
        pending = session.pop(PENDING_PREVIEW_KEY, None)
        if pending and pending.get("url") == url:
            preview = PreviewData.from_dict(pending["preview"], url)
        else:
            preview = _fetch_preview(url)
        try:
            create_link(current_user.id, url, preview)
        except PersistenceError as exc:
            current_app.logger.warning("Saving %s failed: %s", url, exc)
            flash("Could not save the link. Please try again.", "error")
            return render_template("link_form.html", url=url, preview=preview)
        flash("Saved to library.", "success")
        return redirect(url_for("web.library"))

    preview = _fetch_preview(url)
    session[PENDING_PREVIEW_KEY] = {"url": url, "preview": preview.as_dict()}
    return render_template("link_form.html", url=url, preview=preview)


@web_bp.route("/links/<int:link_id>")
@login_required
def links_detail(link_id: int):
    item = get_link(current_user.id, link_id)
    if not item:
        abort(404)
    if item.is_private and not item.is_trash and not vault_unlocked():
        abort(404)
    return render_template("link_detail.html", item=item)


def _update_or_flash(item, success_message: str, **fields):
    try:
        update_link(item, **fields)
    except PersistenceError as exc:
        current_app.logger.warning("Updating link %s failed: %s", item.id, exc)
        flash("Could not update the link. Please try again.", "error")
        return
    if success_message:
        flash(success_message, "success")


@web_bp.route("/links/<int:link_id>/<action>", methods=["POST"])
@login_required
def links_toggle(link_id: int, action: str):
    if action not in TOGGLES:
        abort(404)
    item = get_link(current_user.id, link_id)
    if not item:
        abort(404)
    column = TOGGLES[action]
    _update_or_flash(item, "", **{column: not getattr(item, column)})
    return _back()


@web_bp.route("/links/<int:link_id>/trash", methods=["POST"])
@login_required
def links_trash(link_id: int):
    item = get_link(current_user.id, link_id)
    if not item:
        abort(404)
    _update_or_flash(item, "Moved link to trash.", is_trash=True)
    return _back()


@web_bp.route("/links/<int:link_id>/restore", methods=["POST"])
@login_required
def links_restore(link_id: int):
    item = get_link(current_user.id, link_id)
    if not item:
        abort(404)
    _update_or_flash(item, "Link restored.", is_trash=False)
    return _back(url_for("web.library", filter="trash"))


@web_bp.route("/links/<int:link_id>/purge", methods=["POST"])
@login_required
def links_purge(link_id: int):
    item = get_link(current_user.id, link_id)
    if not item:
        abort(404)
    if not item.is_trash:
        flash("Move the link to trash before deleting it.", "error")
        return _back()
    try:
        delete_link(item)
    except PersistenceError as exc:
        current_app.logger.warning("Deleting link %s failed: %s", link_id, exc)
        flash("Could not delete the link. Please try again.", "error")
    else:
        flash("Link permanently deleted.", "success")
    return redirect(url_for("web.library", filter="trash"))


@web_bp.route("/trash/empty", methods=["POST"])
@login_required
def trash_empty():
    try:
        purged = empty_trash(current_user.id)
    except PersistenceError as exc:
        current_app.logger.warning("Emptying trash failed: %s", exc)
        flash("Could not empty the trash. Please try again.", "error")
    else:
        noun = "link" if purged == 1 else "links"
        flash(f"Permanently deleted {purged} {noun} from trash.", "success")
    return redirect(url_for("web.library", filter="trash"))


@web_bp.route("/vault")
@login_required
def vault():
    spec = _current_spec()
    target = dict(spec.query_args(), tag=PRIVATE_TAG)
    if vault_unlocked():
        return redirect(url_for("web.library", **target))

    status = poll_vault()
    if vault_unlocked():
        return redirect(url_for("web.library", **target))
    if status == VAULT_IDLE:
        status = open_vault()
    if vault_unlocked():
        return redirect(url_for("web.library", **target))
    return render_template("vault.html", status=status, spec=spec)


@web_bp.route("/vault/cancel", methods=["POST"])
@login_required
def vault_cancel():
    cancel_vault()
    spec = ViewSpec.from_args(request.form).without_tag()
    return redirect(url_for("web.library", **spec.query_args()))


@web_bp.route("/vault/lock", methods=["POST"])
@login_required
def vault_lock():
    lock_vault()
    flash("Vault locked.", "success")
    return redirect(url_for("web.library"))
