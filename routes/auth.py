"""Authentication blueprint: signup, verification, login and password reset."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from werkzeug.datastructures import FileStorage

from services.lifecycle import AccountLifecycle, ProfileImage
from utils.request_validation import parse_body_request

auth_bp = Blueprint("auth", __name__)


def _accounts() -> AccountLifecycle:
    return current_app.extensions["accounts"]


def _profile_image() -> ProfileImage | None:
    upload = request.files.get("profilePic")
    if not isinstance(upload, FileStorage) or not upload.filename:
        return None
    return ProfileImage(
        data=upload.read(),
        content_type=upload.mimetype or "application/octet-stream",
    )


@auth_bp.route("/signup", methods=["POST"])
def signup():
    """Register an unverified account from a multipart form with a profile picture."""
    _accounts().signup(request.form.to_dict(), _profile_image())
    return jsonify({"message": "User registered! Please verify your email."})


@auth_bp.route("/verify/<token>", methods=["GET"])
def verify_email(token: str):
    _accounts().verify_email(token)
    return jsonify({"message": "Email verified successfully! You can now log in."})


@auth_bp.route("/login", methods=["POST"])
def login():
    """Exchange email and password for a session token."""
    payload = parse_body_request(request)
    token = _accounts().login(payload.get("email"), payload.get("password"))
    return jsonify({"message": "Login successful", "token": str(token)})


@auth_bp.route("/forgot-password", methods=["POST"])
def forgot_password():
    payload = parse_body_request(request)
    _accounts().forgot_password(payload.get("email"))
    return jsonify({"message": "Password reset email sent!"})


@auth_bp.route("/reset-password/<token>", methods=["POST"])
def reset_password(token: str):
    payload = parse_body_request(request)
    _accounts().reset_password(token, payload.get("newPassword"))
    return jsonify({"message": "Password reset successful! You can now log in."})
