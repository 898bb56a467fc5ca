"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh
- POST /auth/logout
- POST /auth/logout-all

Access tokens travel in the JSON body and the Authorization header.
Refresh tokens only ever travel in the HttpOnly `refreshToken` cookie.
"""
from __future__ import annotations

import logging

from flask import Blueprint, request, jsonify, g, abort, current_app

from models.schemas.user import RegisterSchema, LoginSchema, UserOutSchema
from services.sessions import IssuedSession, current_issuer
from utils.decorators import access_token_required
from utils.security import REFRESH_TOKEN_TTL

logger = logging.getLogger(__name__)

REFRESH_COOKIE = "refreshToken"

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
user_out_schema = UserOutSchema()


def set_refresh_cookie(response, token: str):
    response.set_cookie(
        REFRESH_COOKIE,
        token,
        max_age=int(REFRESH_TOKEN_TTL.total_seconds()),
        httponly=True,
        secure=current_app.config["COOKIE_SECURE"],
        samesite="Strict",
        path="/",
    )
    return response


def clear_refresh_cookie(response):
    response.delete_cookie(
        REFRESH_COOKIE,
        path="/",
        httponly=True,
        secure=current_app.config["COOKIE_SECURE"],
        samesite="Strict",
    )
    return response


def session_response(issued: IssuedSession, message: str, status: int):
    response = jsonify(
        {
            "message": message,
            "user": user_out_schema.dump(issued.user),
            "accessToken": issued.access_token,
        }
    )
    response.status_code = status
    return set_refresh_cookie(response, issued.refresh_token)


@bp.post("/register")
def register():
    """
    Register a new local user.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            email: { type: string }
            password: { type: string }
            name: { type: string }
    responses:
      201:
        description: Created (sets the refresh cookie)
      400:
        description: Validation error
      409:
        description: User already exists
    """
    payload = request.get_json(silent=True) or {}
    data = register_schema.load(payload)
    logger.info("Registration attempt")

    issued = current_issuer().register(data["email"], data["password"], data["name"])
    return session_response(issued, "User registered successfully", 201)


@bp.post("/login")
def login():
    """
    Login with email and password
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns the access token, sets the refresh cookie)
      400:
        description: Validation error
      401:
        description: Invalid credentials
    """
    payload = request.get_json(silent=True) or {}
    data = login_schema.load(payload)

    issued = current_issuer().login(data["email"], data["password"])
    return session_response(issued, "Login successful", 200)


@bp.post("/refresh")
def refresh():
    """
    Exchange the refresh cookie for a new access token.
    The refresh token itself is not rotated.
    ---
    tags:
      - Auth
    responses:
      200:
        description: OK (returns accessToken)
      401:
        description: Refresh cookie missing
      403:
        description: Invalid or expired refresh token
    """
    token = request.cookies.get(REFRESH_COOKIE)
    if not token:
        abort(401, description="Refresh token required")

    access_token = current_issuer().refresh(token)
    return jsonify({"accessToken": access_token}), 200


@bp.post("/logout")
def logout():
    """
    Logout this device: revokes the presented refresh token
    ---
    tags:
      - Auth
    responses:
      200:
        description: OK (clears the refresh cookie)
    """
    token = request.cookies.get(REFRESH_COOKIE)
    if token:
        current_issuer().logout(token)

    response = jsonify({"message": "Logout successful"})
    return clear_refresh_cookie(response)


@bp.post("/logout-all")
@access_token_required()
def logout_all():
    """
    Logout from all devices: revokes every refresh token of the current user
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK (clears the refresh cookie)
      401:
        description: Unauthorized
    """
    current_issuer().logout_all(g.current_user.id)
    response = jsonify({"message": "Logged out from all devices"})
    return clear_refresh_cookie(response)
