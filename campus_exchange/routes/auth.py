from flask import Blueprint, request, jsonify

from campus_exchange.services.user_service import authenticate, register_user
from campus_exchange.validators import json_body, optional_text, require_fields

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/add-user', methods=['POST'])
def add_user():
    """
    Register a new user
    ---
    tags:
      - Auth
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - FullName
            - Email
            - PasswordHash
          properties:
            FullName:
              type: string
            Email:
              type: string
            PasswordHash:
              type: string
              description: The user's password (hashed server-side). "Password" is accepted too.
            Role:
              type: string
              default: student
    responses:
      200:
        description: User registered
      400:
        description: Missing fields, invalid email or email already exists
    """
    data = json_body(request)
    # Older clients send the password under "PasswordHash"
    if not data.get('PasswordHash') and data.get('Password'):
        data['PasswordHash'] = data['Password']

    require_fields(data, ['FullName', 'Email', 'PasswordHash'])

    user = register_user(
        full_name=str(data['FullName']),
        email=data['Email'],
        password=str(data['PasswordHash']),
        role=optional_text(data.get('Role')),
    )
    return jsonify({'message': 'User registered', 'userId': user.user_id}), 200


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Authenticate a user by email and password
    ---
    tags:
      - Auth
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - Email
            - Password
          properties:
            Email:
              type: string
            Password:
              type: string
    responses:
      200:
        description: Login successful, returns the user record
      400:
        description: Missing credentials
      401:
        description: Invalid credentials
    """
    data = json_body(request)
    if not data.get('Email') or not data.get('Password'):
        return jsonify({'error': 'Missing credentials'}), 400

    user = authenticate(data['Email'], str(data['Password']))
    return jsonify({'message': 'Login ok', 'user': user.to_dict()}), 200
