# backend/categories.py
import logging

from flask import Blueprint, jsonify
from flask_jwt_extended import get_jwt_identity, jwt_required

from . import consistency, db
from .errors import ConflictError
from .helpers import get_json_body, parse_type, require_fields
from .models import Category

logger = logging.getLogger("expense-tracker")

categories_bp = Blueprint("categories", __name__)


def normalize_name(name):
    return str(name).strip().lower()


@categories_bp.route('/create', methods=['POST'])
@jwt_required()
def create_category():
    user_id = int(get_jwt_identity())
    data = get_json_body()
    require_fields(data, 'name', 'type', message="Name and type are required for creating a category")

    name = normalize_name(data['name'])
    category_type = parse_type(data['type'])

    existing = db.query_db(
        "SELECT id FROM categories WHERE user_id=? AND name=?", (user_id, name), one=True
    )
    if existing:
        raise ConflictError(f"Category {name} already exists in the database")

    category_id = db.execute_db(
        "INSERT INTO categories (user_id, name, type) VALUES (?,?,?)",
        (user_id, name, category_type)
    )
    logger.info(f"Created category {category_id} '{name}' ({category_type}) for user {user_id}")
    row = db.query_db("SELECT * FROM categories WHERE id=?", (category_id,), one=True)
    return jsonify(Category.from_row(row).to_dict()), 201


@categories_bp.route('/lists', methods=['GET'])
@jwt_required()
def list_categories():
    user_id = int(get_jwt_identity())
    rows = db.query_db("SELECT * FROM categories WHERE user_id=? ORDER BY name", (user_id,))
    return jsonify([Category.from_row(r).to_dict() for r in rows])


@categories_bp.route('/update/<int:category_id>', methods=['PUT'])
@jwt_required()
def update_category(category_id):
    user_id = int(get_jwt_identity())
    data = get_json_body()

    name = normalize_name(data['name']) if data.get('name') else None
    category_type = parse_type(data['type']) if data.get('type') else None

    category, _ = consistency.update_category(category_id, user_id, name=name, category_type=category_type)
    return jsonify(category.to_dict())


@categories_bp.route('/delete/<int:category_id>', methods=['DELETE'])
@jwt_required()
def delete_category(category_id):
    user_id = int(get_jwt_identity())
    consistency.delete_category(category_id, user_id)
    return jsonify({"message": "Category removed and transactions updated"})
