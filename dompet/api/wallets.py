from flask import Blueprint, jsonify, request

from dompet.api import get_workspace, store_response

bp = Blueprint("wallets", __name__)

@bp.get("/")
def list_wallets():
    """Get semua wallet untuk user"""
    workspace = get_workspace()
    wallet_type = request.args.get("type")
    if wallet_type:
        return jsonify(workspace.wallets.by_type(wallet_type))
    if request.args.get("sort") == "balance":
        return jsonify(workspace.wallets.sorted_by_balance())
    return jsonify(workspace.wallets.items)

@bp.post("/")
def create_wallet():
    """Create wallet baru; balance awal jadi opening_balance"""
    workspace = get_workspace()
    body = request.get_json(force=True) or {}
    wallet = workspace.wallets.create(body)
    return store_response(workspace, wallet, 201, "Failed to create wallet")

@bp.get("/<wallet_id>")
def get_wallet(wallet_id):
    workspace = get_workspace()
    wallet = workspace.wallets.get(wallet_id)
    if not wallet:
        return jsonify({"error": "Wallet not found"}), 404
    return jsonify(wallet)

@bp.put("/<wallet_id>")
def update_wallet(wallet_id):
    """Update nama/tipe/warna/icon; balance hanya berubah lewat transaksi"""
    workspace = get_workspace()
    body = request.get_json(force=True) or {}
    body.pop("balance", None)
    wallet = workspace.wallets.update(wallet_id, body)
    return store_response(workspace, wallet, default_message="Wallet not found or update failed")

@bp.delete("/<wallet_id>")
def delete_wallet(wallet_id):
    """Delete wallet beserta transaksinya"""
    workspace = get_workspace()
    if workspace.wallets.delete(wallet_id) is None:
        return store_response(workspace, None, default_message="Wallet not found or delete failed")
    return jsonify({"message": "Wallet deleted successfully"})
