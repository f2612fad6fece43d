from flask import Blueprint, Response, jsonify, request

from dompet.api import get_workspace
from dompet.errors import ValidationError

bp = Blueprint("reports", __name__)

@bp.get("/export")
def export_transactions():
    """Download transaksi dalam format CSV, opsional dibatasi start/end"""
    workspace = get_workspace()
    try:
        filename, content = workspace.export_transactions(
            request.args.get("start"), request.args.get("end"), request.args.get("currency"),
        )
    except ValidationError as e:
        return jsonify({"error": e.message}), 400
    return Response(
        content,
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
