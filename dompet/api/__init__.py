"""Flask blueprints exposing a user's workspace as JSON under /api/."""
from flask import current_app, jsonify, session

from dompet.errors import (
    CategoryInUseError,
    ConcurrentUpdateError,
    MutationInProgressError,
    NotFoundError,
    ProtectedCategoryError,
    ValidationError,
)
from dompet.workspace import FinanceWorkspace


WORKSPACES_KEY = "dompet.workspaces"

STATUS_BY_ERROR = (
    (ValidationError, 400),
    (ProtectedCategoryError, 403),
    (NotFoundError, 404),
    (CategoryInUseError, 409),
    (ConcurrentUpdateError, 409),
    (MutationInProgressError, 409),
)


def current_user_id() -> str:
    return session.get("user_id", "demo_user")


def get_workspace() -> FinanceWorkspace:
    """Workspace user yang sedang aktif, di-cache per user_id"""
    workspaces = current_app.extensions.setdefault(WORKSPACES_KEY, {})
    user_id = current_user_id()
    workspace = workspaces.get(user_id)
    if workspace is None:
        workspace = FinanceWorkspace(user_id).load()
        workspaces[user_id] = workspace
    return workspace


def status_for(error) -> int:
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 500


def failure_response(workspace: FinanceWorkspace, default_message: str = "Operation failed"):
    """JSON error body built from the failure this request ran into"""
    note = workspace.notifier.last_failure()
    if note is None or not note.destructive:
        return jsonify({"error": default_message}), 500
    print(f"❌ [API] {note.title}: {note.description}")
    return jsonify({"error": note.description, "title": note.title}), status_for(note.error)


def store_response(workspace: FinanceWorkspace, result, status: int = 200, default_message: str = "Operation failed"):
    if result is None:
        return failure_response(workspace, default_message)
    return jsonify(result), status


def register_blueprints(app) -> None:
    from dompet.api import budgets, categories, pinjaman, reports, summary, transactions, wallets, want_to_buy

    app.register_blueprint(wallets.bp, url_prefix="/api/wallets")
    app.register_blueprint(transactions.bp, url_prefix="/api/transactions")
    app.register_blueprint(budgets.bp, url_prefix="/api/budgets")
    app.register_blueprint(categories.bp, url_prefix="/api/categories")
    app.register_blueprint(pinjaman.bp, url_prefix="/api/pinjaman")
    app.register_blueprint(want_to_buy.bp, url_prefix="/api/want-to-buy")
    app.register_blueprint(summary.bp, url_prefix="/api/summary")
    app.register_blueprint(reports.bp, url_prefix="/api/reports")
