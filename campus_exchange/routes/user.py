from flask import Blueprint, jsonify

from campus_exchange.services.user_service import get_user

user_bp = Blueprint('users', __name__)


@user_bp.route('/users/<int:user_id>', methods=['GET'])
def get_user_profile(user_id):
    """
    Get a user's public profile
    ---
    tags:
      - Users
    parameters:
      - in: path
        name: user_id
        required: true
        type: integer
    responses:
      200:
        description: User profile
      404:
        description: User not found
    """
    return jsonify(get_user(user_id).to_dict()), 200
