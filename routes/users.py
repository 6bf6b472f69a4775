"""Account administration blueprint."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, Response, current_app, jsonify, request

from services.exceptions import AccountNotFound, InvalidAccountId
from services.lifecycle import AccountLifecycle
from utils.request_validation import parse_body_request, parse_json_request

users_bp = Blueprint("users", __name__)


def _accounts() -> AccountLifecycle:
    return current_app.extensions["accounts"]


def _parse_account_id(raw_id: str) -> int:
    try:
        account_id = int(raw_id)
    except (TypeError, ValueError):
        raise InvalidAccountId() from None
    if account_id <= 0:
        raise InvalidAccountId()
    return account_id


def _lookup_id(raw_id: str, message: str = "User not found") -> int:
    """Ids that cannot exist resolve to "not found" on read endpoints."""
    try:
        return _parse_account_id(raw_id)
    except InvalidAccountId:
        raise AccountNotFound(message) from None


@users_bp.route("", methods=["POST"])
def create_user():
    """Create an account directly, bypassing email verification."""
    payload = parse_body_request(request)
    account = _accounts().create_account(payload)
    return (
        jsonify({"message": "User created successfully", "user": account.to_dict()}),
        HTTPStatus.CREATED,
    )


@users_bp.route("", methods=["GET"])
def list_users():
    return jsonify([account.to_dict() for account in _accounts().list_accounts()])


@users_bp.route("/<raw_id>", methods=["GET"])
def get_user(raw_id: str):
    account_id = _lookup_id(raw_id)
    return jsonify(_accounts().get_account(account_id).to_dict())


@users_bp.route("/<raw_id>", methods=["PUT"])
def update_user(raw_id: str):
    account_id = _parse_account_id(raw_id)
    payload = parse_json_request(request)
    account = _accounts().update_account(account_id, payload)
    return jsonify(account.to_dict())


@users_bp.route("/<raw_id>", methods=["DELETE"])
def delete_user(raw_id: str):
    account_id = _parse_account_id(raw_id)
    deleted = _accounts().delete_account(account_id)
    return jsonify({"message": "User deleted successfully", "user": deleted})


@users_bp.route("/<raw_id>/profilePic", methods=["GET"])
def profile_picture(raw_id: str):
    """Return the stored profile picture bytes with their content type."""
    account_id = _lookup_id(raw_id, "Image not found")
    image = _accounts().profile_picture(account_id)
    return Response(image.data, mimetype=image.content_type)
