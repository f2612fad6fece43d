from flask import Blueprint, jsonify, request

from dompet.api import get_workspace, store_response

bp = Blueprint("want_to_buy", __name__)

@bp.get("/")
def list_items():
    workspace = get_workspace()
    store = workspace.want_to_buy
    priority = request.args.get("priority")
    category = request.args.get("category")
    if priority:
        return jsonify(store.by_priority(priority))
    if category:
        return jsonify(store.by_category(category))
    if request.args.get("purchased") == "true":
        return jsonify(store.purchased())
    return jsonify(store.items)

@bp.post("/")
def create_item():
    workspace = get_workspace()
    body = request.get_json(force=True) or {}
    item = workspace.want_to_buy.create(body)
    return store_response(workspace, item, 201, "Failed to create item")

@bp.put("/<item_id>")
def update_item(item_id):
    workspace = get_workspace()
    body = request.get_json(force=True) or {}
    item = workspace.want_to_buy.update(item_id, body)
    return store_response(workspace, item, default_message="Item not found or update failed")

@bp.post("/<item_id>/toggle")
def toggle_item(item_id):
    """Tandai sudah/belum dibeli"""
    workspace = get_workspace()
    item = workspace.want_to_buy.toggle_purchased(item_id)
    return store_response(workspace, item, default_message="Item not found or update failed")

@bp.delete("/<item_id>")
def delete_item(item_id):
    workspace = get_workspace()
    if workspace.want_to_buy.delete(item_id) is None:
        return store_response(workspace, None, default_message="Item not found or delete failed")
    return jsonify({"message": "Item deleted successfully"})
