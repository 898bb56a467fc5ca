from __future__ import annotations

from flask import Blueprint, request, jsonify, g

from models.schemas.user import ProfileUpdateSchema, UserOutSchema
from services.sessions import current_issuer
from utils.decorators import access_token_required

bp = Blueprint("users", __name__)

profile_update_schema = ProfileUpdateSchema()
user_out_schema = UserOutSchema()


@bp.get("/profile")
@access_token_required()
def get_profile():
    """
    Get the current user's profile
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    return jsonify({"user": user_out_schema.dump(g.current_user)}), 200


@bp.put("/profile")
@access_token_required()
def update_profile():
    """
    Update name and/or avatar of the current user
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            name: { type: string }
            avatar: { type: string }
    responses:
      200:
        description: OK
      400:
        description: Validation error
      401:
        description: Unauthorized
    """
    payload = request.get_json(silent=True) or {}
    data = profile_update_schema.load(payload)

    user = current_issuer().resolver.update_profile(
        g.current_user, name=data.get("name"), avatar=data.get("avatar")
    )
    return jsonify(
        {
            "message": "Profile updated successfully",
            "user": user_out_schema.dump(user),
        }
    ), 200
