from flask import Blueprint, jsonify, request

from config import DEFAULT_CURRENCY
from dompet.api import get_workspace
from dompet.currency import format_currency

bp = Blueprint("summary", __name__)

@bp.get("/")
def get_summary():
    """Ringkasan saldo, pemasukan dan pengeluaran bulan ini"""
    workspace = get_workspace()
    data = workspace.summary()
    currency = request.args.get("currency", DEFAULT_CURRENCY)
    data["formatted"] = {
        key: format_currency(data[key], currency)
        for key in ("total_balance", "monthly_income", "monthly_expense", "monthly_net")
    }
    return jsonify(data)

@bp.get("/notifications")
def list_notifications():
    workspace = get_workspace()
    return jsonify([
        {"title": n.title, "description": n.description, "variant": n.variant}
        for n in workspace.notifier.all()
    ])
