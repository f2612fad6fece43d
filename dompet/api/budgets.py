from flask import Blueprint, jsonify, request

from dompet.api import get_workspace, store_response

bp = Blueprint("budgets", __name__)

@bp.get("/")
def list_budgets():
    """Budget dengan nilai spent periode berjalan"""
    workspace = get_workspace()
    status = request.args.get("status")
    if status:
        return jsonify(workspace.budgets.by_status(status, workspace.transactions.items))
    if request.args.get("sort") == "utilization":
        return jsonify(workspace.budgets.sorted_by_utilization(workspace.transactions.items))
    return jsonify(workspace.budgets.with_spent(workspace.transactions.items))

@bp.get("/alerts")
def list_budget_alerts():
    workspace = get_workspace()
    return jsonify(workspace.budgets.alerts(workspace.transactions.items))

@bp.get("/summary")
def budget_summary():
    workspace = get_workspace()
    return jsonify(workspace.budgets.summary(workspace.transactions.items))

@bp.post("/")
def create_budget():
    workspace = get_workspace()
    body = request.get_json(force=True) or {}
    budget = workspace.budgets.create(body)
    return store_response(workspace, budget, 201, "Failed to create budget")

@bp.put("/<budget_id>")
def update_budget(budget_id):
    workspace = get_workspace()
    body = request.get_json(force=True) or {}
    budget = workspace.budgets.update(budget_id, body)
    return store_response(workspace, budget, default_message="Budget not found or update failed")

@bp.delete("/<budget_id>")
def delete_budget(budget_id):
    workspace = get_workspace()
    if workspace.budgets.delete(budget_id) is None:
        return store_response(workspace, None, default_message="Budget not found or delete failed")
    return jsonify({"message": "Budget deleted successfully"})
