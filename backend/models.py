# backend/models.py
# lightweight model classes (not DB-bound ORM)

UNCATEGORIZED = "Uncategorized"
TRANSACTION_TYPES = ("income", "expense")


class User:
    def __init__(self, id, username, email, password_hash, created_at=None, updated_at=None):
        self.id = id
        self.username = username
        self.email = email
        self.password_hash = password_hash
        self.created_at = created_at
        self.updated_at = updated_at

    @classmethod
    def from_row(cls, row):
        return cls(row['id'], row['username'], row['email'], row['password_hash'],
                   row['created_at'], row['updated_at'])

    def to_dict(self):
        # never expose the password hash
        return {"id": self.id, "username": self.username, "email": self.email}


class Category:
    def __init__(self, id, user_id, name, type, created_at=None, updated_at=None):
        self.id = id
        self.user_id = user_id
        self.name = name
        self.type = type
        self.created_at = created_at
        self.updated_at = updated_at

    @classmethod
    def from_row(cls, row):
        return cls(row['id'], row['user_id'], row['name'], row['type'],
                   row['created_at'], row['updated_at'])

    def to_dict(self):
        return {
            "id": self.id,
            "user": self.user_id,
            "name": self.name,
            "type": self.type,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


class Transaction:
    def __init__(self, id, user_id, type, category, amount, date, description=None,
                 created_at=None, updated_at=None):
        self.id = id
        self.user_id = user_id
        self.type = type
        self.category = category
        self.amount = amount
        self.date = date
        self.description = description
        self.created_at = created_at
        self.updated_at = updated_at

    @classmethod
    def from_row(cls, row):
        return cls(row['id'], row['user_id'], row['type'], row['category'], row['amount'],
                   row['date'], row['description'], row['created_at'], row['updated_at'])

    def to_dict(self):
        return {
            "id": self.id,
            "user": self.user_id,
            "type": self.type,
            "category": self.category,
            "amount": float(self.amount),
            "date": self.date,
            "description": self.description,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
