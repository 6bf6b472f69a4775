"""Utilities for validating incoming Flask requests."""

from __future__ import annotations

from flask import Request
from werkzeug.exceptions import BadRequest


def parse_json_request(
    req: Request,
    *,
    allow_empty: bool = False,
) -> dict:
    """Return the parsed JSON body or raise a 400 error."""

    if not req.is_json:
        raise BadRequest("Request content type must be application/json.")

    data = req.get_json(silent=False)
    if data is None:
        raise BadRequest("Request JSON body is required.")

    if not isinstance(data, dict):
        raise BadRequest("Request JSON payload must be an object.")

    if not data and not allow_empty:
        raise BadRequest("Request JSON body must not be empty.")

    return data


def parse_body_request(req: Request) -> dict:
    """Return the fields of a JSON or form-encoded body.

    JSON bodies go through :func:`parse_json_request`; anything else is read
    from ``req.form``, which covers urlencoded and multipart submissions.
    """

    if req.is_json:
        return parse_json_request(req, allow_empty=True)
    return req.form.to_dict()
