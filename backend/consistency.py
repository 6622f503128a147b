# backend/consistency.py
"""Keep transaction category labels in step with the categories they name.

Transactions store a copy of the category name rather than its id, so a
rename or delete has to sweep every transaction of the owner that still
carries the old name. Each sweep runs in the same store transaction as the
category write it belongs to.
"""
import logging
import sqlite3

from . import db
from .errors import AuthorizationError, NotFoundError
from .models import UNCATEGORIZED, Category

logger = logging.getLogger("expense-tracker")


def get_owned_category(category_id, user_id):
    """Fetch a category and check it belongs to ``user_id``.

    Raises NotFoundError or AuthorizationError; nothing is written either way.
    """
    row = db.query_db("SELECT * FROM categories WHERE id=?", (category_id,), one=True)
    if not row:
        logger.warning(f"Category {category_id} not found (user {user_id})")
        raise NotFoundError("Category not found")
    category = Category.from_row(row)
    if category.user_id != user_id:
        logger.warning(f"User {user_id} tried to modify category {category_id} of user {category.user_id}")
        raise AuthorizationError("User not authorized to modify this category")
    return category


def update_category(category_id, user_id, name=None, category_type=None):
    """Apply a partial update; a changed name is propagated to transactions.

    ``name`` is expected normalized already. Returns ``(category, swept)``
    where ``swept`` counts the transactions relabelled.
    """
    category = get_owned_category(category_id, user_id)
    old_name = category.name
    new_name = name or old_name
    new_type = category_type or category.type

    swept = 0
    try:
        with db.transaction() as cur:
            cur.execute(
                "UPDATE categories SET name=?, type=?, updated_at=CURRENT_TIMESTAMP WHERE id=?",
                (new_name, new_type, category.id)
            )
            if new_name != old_name:
                cur.execute(
                    "UPDATE transactions SET category=?, updated_at=CURRENT_TIMESTAMP "
                    "WHERE user_id=? AND lower(category)=? AND category!=?",
                    (new_name, user_id, old_name.lower(), UNCATEGORIZED)
                )
                swept = cur.rowcount
    except sqlite3.Error:
        logger.exception(f"Category rename '{old_name}' -> '{new_name}' failed for user {user_id}; rolled back")
        raise

    if new_name != old_name:
        logger.info(f"Renamed category {category.id} '{old_name}' -> '{new_name}', {swept} transactions updated")

    updated = get_owned_category(category.id, user_id)
    return updated, swept


def delete_category(category_id, user_id):
    """Repoint the category's transactions to the sentinel, then delete it.

    Returns the number of transactions repointed.
    """
    category = get_owned_category(category_id, user_id)

    try:
        with db.transaction() as cur:
            cur.execute(
                "UPDATE transactions SET category=?, updated_at=CURRENT_TIMESTAMP "
                "WHERE user_id=? AND lower(category)=? AND category!=?",
                (UNCATEGORIZED, user_id, category.name.lower(), UNCATEGORIZED)
            )
            swept = cur.rowcount
            cur.execute("DELETE FROM categories WHERE id=? AND user_id=?", (category.id, user_id))
    except sqlite3.Error:
        logger.exception(f"Deleting category {category.id} '{category.name}' failed for user {user_id}; rolled back")
        raise

    logger.info(f"Deleted category {category.id} '{category.name}', {swept} transactions moved to {UNCATEGORIZED}")
    return swept
