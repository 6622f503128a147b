# backend/transactions.py
import logging
from datetime import date

from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from . import db
from .errors import AuthorizationError, NotFoundError, ValidationError
from .filters import build_transaction_filter
from .helpers import get_json_body, parse_amount, parse_description, parse_type, require_date
from .models import UNCATEGORIZED, Transaction

logger = logging.getLogger("expense-tracker")

transactions_bp = Blueprint("transactions", __name__)

UPDATABLE_FIELDS = ("type", "category", "amount", "date", "description")


def _get_owned_transaction(tx_id, user_id):
    row = db.query_db("SELECT * FROM transactions WHERE id=?", (tx_id,), one=True)
    if not row:
        logger.warning(f"Transaction {tx_id} not found (user {user_id})")
        raise NotFoundError("Transaction not found")
    tx = Transaction.from_row(row)
    if tx.user_id != user_id:
        logger.warning(f"User {user_id} tried to modify transaction {tx_id} of user {tx.user_id}")
        raise AuthorizationError("User not authorized to modify this transaction")
    return tx


def _clean_value(field, value):
    """Validate one incoming transaction field."""
    if field == "type":
        return parse_type(value)
    if field == "amount":
        return parse_amount(value)
    if field == "date":
        return require_date(value).isoformat()
    if field == "category":
        return str(value).strip() or UNCATEGORIZED
    return parse_description(value)


@transactions_bp.route('/create', methods=['POST'])
@jwt_required()
def create_transaction():
    user_id = int(get_jwt_identity())
    data = get_json_body()
    if not data.get('type') or data.get('amount') in (None, ''):
        raise ValidationError("Type and amount are required")

    tx_type = _clean_value("type", data['type'])
    amount = _clean_value("amount", data['amount'])
    tx_date = _clean_value("date", data['date']) if data.get('date') else date.today().isoformat()
    category = _clean_value("category", data['category']) if data.get('category') else UNCATEGORIZED
    description = _clean_value("description", data['description']) if data.get('description') else None

    tx_id = db.execute_db(
        "INSERT INTO transactions (user_id, type, category, amount, date, description) VALUES (?,?,?,?,?,?)",
        (user_id, tx_type, category, amount, tx_date, description)
    )
    logger.info(f"Created {tx_type} transaction {tx_id} ({amount} in '{category}') for user {user_id}")
    row = db.query_db("SELECT * FROM transactions WHERE id=?", (tx_id,), one=True)
    return jsonify(Transaction.from_row(row).to_dict()), 201


@transactions_bp.route('/lists', methods=['GET'])
@jwt_required()
def list_transactions():
    user_id = int(get_jwt_identity())
    args = request.args
    tx_filter = build_transaction_filter(
        user_id,
        start_date=args.get('startDate'),
        end_date=args.get('endDate'),
        tx_type=args.get('type'),
        category=args.get('category'),
    )
    where, params = tx_filter.where()
    rows = db.query_db(
        f"SELECT * FROM transactions WHERE {where} ORDER BY date DESC, id DESC", params
    )
    return jsonify([Transaction.from_row(r).to_dict() for r in rows])


@transactions_bp.route('/update/<int:tx_id>', methods=['PUT'])
@jwt_required()
def update_transaction(tx_id):
    user_id = int(get_jwt_identity())
    tx = _get_owned_transaction(tx_id, user_id)
    data = get_json_body()

    # falsy incoming values mean "keep the stored value"
    changes = {f: _clean_value(f, data[f]) for f in UPDATABLE_FIELDS if data.get(f)}
    if changes:
        assignments = ", ".join(f"{field}=?" for field in changes)
        db.execute_db(
            f"UPDATE transactions SET {assignments}, updated_at=CURRENT_TIMESTAMP WHERE id=? AND user_id=?",
            (*changes.values(), tx.id, user_id)
        )
    row = db.query_db("SELECT * FROM transactions WHERE id=?", (tx.id,), one=True)
    return jsonify(Transaction.from_row(row).to_dict())


@transactions_bp.route('/delete/<int:tx_id>', methods=['DELETE'])
@jwt_required()
def delete_transaction(tx_id):
    user_id = int(get_jwt_identity())
    tx = _get_owned_transaction(tx_id, user_id)
    db.execute_db("DELETE FROM transactions WHERE id=? AND user_id=?", (tx.id, user_id))
    logger.info(f"Deleted transaction {tx.id} for user {user_id}")
    return jsonify({"message": "Transaction removed"})
