from flask import Blueprint, jsonify, request

from dompet.api import get_workspace, store_response
from dompet.errors import ValidationError

bp = Blueprint("transactions", __name__)

DEFAULT_LIMIT = 200

@bp.get("/")
def list_transactions():
    workspace = get_workspace()
    store = workspace.transactions
    wallet_id = request.args.get("wallet_id")
    category_id = request.args.get("category_id")
    start, end = request.args.get("start"), request.args.get("end")

    data = store.items
    if wallet_id:
        data = store.transactions_by_wallet(wallet_id)
    elif category_id:
        data = store.transactions_by_category(category_id)
    elif start and end:
        try:
            data = store.transactions_in_range(start, end)
        except ValidationError as e:
            return jsonify({"error": e.message}), 400

    try:
        limit = int(request.args.get("limit", DEFAULT_LIMIT))
    except ValueError:
        limit = DEFAULT_LIMIT
    if limit <= 0:
        limit = DEFAULT_LIMIT
    return jsonify(data[:limit])

@bp.post("/")
def create_transaction():
    workspace = get_workspace()
    body = request.get_json(force=True) or {}
    tx = workspace.transactions.create(body)
    return store_response(workspace, tx, 201, "Failed to create transaction")

@bp.get("/audit")
def audit_transactions():
    """Wallet yang balance-nya tidak cocok dengan riwayat transaksi"""
    workspace = get_workspace()
    return jsonify(workspace.transactions.audit_balances())

@bp.get("/<transaction_id>")
def get_transaction(transaction_id):
    workspace = get_workspace()
    tx = workspace.transactions.get(transaction_id)
    if not tx:
        return jsonify({"error": "Transaction not found"}), 404
    return jsonify(tx)

@bp.put("/<transaction_id>")
def update_transaction(transaction_id):
    workspace = get_workspace()
    body = request.get_json(force=True) or {}
    tx = workspace.transactions.update(transaction_id, body)
    return store_response(workspace, tx, default_message="Transaction not found or update failed")

@bp.delete("/<transaction_id>")
def delete_transaction(transaction_id):
    workspace = get_workspace()
    if workspace.transactions.delete(transaction_id) is None:
        return store_response(workspace, None, default_message="Transaction not found or delete failed")
    return jsonify({"message": "Transaction deleted successfully"})
