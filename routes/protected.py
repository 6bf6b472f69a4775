"""Routes gated by session tokens and roles."""

from __future__ import annotations

from flask import Blueprint, g, jsonify

from services.access import auth_required, role_required

protected_bp = Blueprint("protected", __name__)


def _claims_payload() -> dict[str, object]:
    claims = g.claims
    return {
        "id": claims.account_id,
        "role": claims.role,
        "expires_at": claims.expires_at.isoformat(),
    }


@protected_bp.route("/protected", methods=["GET"])
@auth_required
def protected():
    return jsonify({"message": "You accessed a protected route!", "user": _claims_payload()})


@protected_bp.route("/admin", methods=["GET"])
@role_required("admin")
def admin():
    return jsonify({"message": "Welcome, Admin! You have full access."})
