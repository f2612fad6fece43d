from flask import Blueprint, jsonify, request

from dompet.api import get_workspace, store_response

bp = Blueprint("pinjaman", __name__)

@bp.get("/")
def list_pinjaman():
    """Utang/piutang, urut berdasarkan jatuh tempo"""
    workspace = get_workspace()
    store = workspace.pinjaman
    status = request.args.get("status")
    if status == "settled":
        return jsonify(store.settled())
    if status == "unsettled":
        return jsonify(store.unsettled())
    if status == "overdue":
        return jsonify(store.overdue())
    category = request.args.get("category")
    if category:
        return jsonify(store.by_category(category))
    return jsonify(store.items)

@bp.get("/totals")
def pinjaman_totals():
    store = get_workspace().pinjaman
    return jsonify({
        "total_debt": store.total_debt(),
        "total_credit": store.total_credit(),
        "net_position": store.net_position(),
    })

@bp.post("/")
def create_pinjaman():
    workspace = get_workspace()
    body = request.get_json(force=True) or {}
    item = workspace.pinjaman.create(body)
    return store_response(workspace, item, 201, "Failed to create pinjaman")

@bp.put("/<item_id>")
def update_pinjaman(item_id):
    workspace = get_workspace()
    body = request.get_json(force=True) or {}
    item = workspace.pinjaman.update(item_id, body)
    return store_response(workspace, item, default_message="Pinjaman not found or update failed")

@bp.post("/<item_id>/toggle")
def toggle_pinjaman(item_id):
    workspace = get_workspace()
    item = workspace.pinjaman.toggle_settled(item_id)
    return store_response(workspace, item, default_message="Pinjaman not found or update failed")

@bp.delete("/<item_id>")
def delete_pinjaman(item_id):
    workspace = get_workspace()
    if workspace.pinjaman.delete(item_id) is None:
        return store_response(workspace, None, default_message="Pinjaman not found or delete failed")
    return jsonify({"message": "Pinjaman deleted successfully"})
