from flask import Blueprint, jsonify, request

from config import DEFAULT_LANGUAGE
from dompet.api import get_workspace, store_response

bp = Blueprint("categories", __name__)

@bp.get("/")
def list_categories():
    """Get kategori default + custom, dengan nama sesuai bahasa"""
    workspace = get_workspace()
    language = request.args.get("lang", DEFAULT_LANGUAGE)
    category_type = request.args.get("type")
    rows = workspace.categories.by_type(category_type) if category_type else workspace.categories.items
    resolver = workspace.resolver
    data = [dict(c, display_name=resolver.display_name(c, language)) for c in rows]
    return jsonify(data)

@bp.post("/")
def create_category():
    workspace = get_workspace()
    body = request.get_json(force=True) or {}
    category = workspace.categories.create(body)
    return store_response(workspace, category, 201, "Failed to create category")

@bp.put("/<int:category_id>")
def update_category(category_id):
    workspace = get_workspace()
    body = request.get_json(force=True) or {}
    category = workspace.categories.update(category_id, body)
    return store_response(workspace, category, default_message="Category not found or update failed")

@bp.delete("/<int:category_id>")
def delete_category(category_id):
    workspace = get_workspace()
    if workspace.categories.delete(category_id) is None:
        return store_response(workspace, None, default_message="Category not found or delete failed")
    return jsonify({"message": "Category deleted successfully"})
