# backend/users.py
import logging

from flask import Blueprint, jsonify
from flask_jwt_extended import create_access_token, get_jwt_identity, jwt_required
from werkzeug.security import check_password_hash, generate_password_hash

from . import db
from .errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from .helpers import get_json_body, require_fields
from .models import User

logger = logging.getLogger("expense-tracker")

users_bp = Blueprint("users", __name__)


def _get_user(user_id):
    row = db.query_db("SELECT * FROM users WHERE id=?", (user_id,), one=True)
    if not row:
        raise NotFoundError("User not found")
    return User.from_row(row)


def _find_by_email(email):
    row = db.query_db("SELECT * FROM users WHERE email=?", (email,), one=True)
    return User.from_row(row) if row else None


def _check_identity_free(username=None, email=None, exclude_id=None):
    """Raise ConflictError when another user already holds the username or email."""
    if email:
        row = db.query_db("SELECT id FROM users WHERE email=?", (email,), one=True)
        if row and row['id'] != exclude_id:
            raise ConflictError("User already exists")
    if username:
        row = db.query_db("SELECT id FROM users WHERE username=?", (username,), one=True)
        if row and row['id'] != exclude_id:
            raise ConflictError("Username already taken")


@users_bp.route('/register', methods=['POST'])
def register():
    data = get_json_body()
    require_fields(data, 'username', 'email', 'password', message="Please all fields are required")

    username = str(data['username']).strip()
    email = str(data['email']).strip().lower()
    _check_identity_free(username=username, email=email)

    user_id = db.execute_db(
        "INSERT INTO users (username, email, password_hash) VALUES (?,?,?)",
        (username, email, generate_password_hash(str(data['password'])))
    )
    logger.info(f"Registered user {user_id} ({email})")
    return jsonify({"username": username, "email": email, "id": user_id}), 201


@users_bp.route('/login', methods=['POST'])
def login():
    data = get_json_body()
    require_fields(data, 'email', 'password', message="Email and password are required")

    user = _find_by_email(str(data['email']).strip().lower())
    if not user or not check_password_hash(user.password_hash, str(data['password'])):
        logger.warning(f"Failed login attempt for {data.get('email')}")
        raise AuthenticationError("Invalid login credentials")

    token = create_access_token(identity=str(user.id))
    logger.info(f"User {user.id} logged in")
    return jsonify({
        "message": "Login Success",
        "token": token,
        "id": user.id,
        "email": user.email,
        "username": user.username,
    })


@users_bp.route('/profile', methods=['GET'])
@jwt_required()
def profile():
    user = _get_user(int(get_jwt_identity()))
    return jsonify({"username": user.username, "email": user.email})


@users_bp.route('/change-password', methods=['PUT'])
@jwt_required()
def change_password():
    user = _get_user(int(get_jwt_identity()))
    data = get_json_body()
    require_fields(data, 'newPassword', message="New password is required")

    db.execute_db(
        "UPDATE users SET password_hash=?, updated_at=CURRENT_TIMESTAMP WHERE id=?",
        (generate_password_hash(str(data['newPassword'])), user.id)
    )
    return jsonify({"message": "Password Changed successfully"})


@users_bp.route('/update-profile', methods=['PUT'])
@jwt_required()
def update_profile():
    user = _get_user(int(get_jwt_identity()))
    data = get_json_body()

    username = str(data.get('username') or '').strip() or user.username
    email = str(data.get('email') or '').strip().lower() or user.email
    if not data.get('username') and not data.get('email'):
        raise ValidationError("Username or email is required")
    _check_identity_free(username=username, email=email, exclude_id=user.id)

    db.execute_db(
        "UPDATE users SET username=?, email=?, updated_at=CURRENT_TIMESTAMP WHERE id=?",
        (username, email, user.id)
    )
    updated = _get_user(user.id)
    return jsonify({"message": "User profile updated successfully", "updatedUser": updated.to_dict()})
