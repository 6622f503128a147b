# frontend/session.py
"""Client-side session: the token, the signed-in user and the loaded lists.

A ``ClientSession`` is created once per browser session, hydrated from that
browser's own file at startup and handed to whatever needs it. Each browser is
identified by a random id; its file lives under ``DEFAULT_SESSION_DIR`` and is
never shared with another browser. Only the token and the user are persisted;
the lists are reloaded from the API.
"""
import json
import logging
import os
import re
import uuid

logger = logging.getLogger("expense-tracker-client")

DEFAULT_SESSION_DIR = os.environ.get(
    "EXPENSE_SESSION_DIR",
    os.path.join(os.path.expanduser("~"), ".expense_tracker", "sessions"),
)
BROWSER_ID_RE = re.compile(r"^[0-9a-f]{32}$")


def new_browser_id():
    return uuid.uuid4().hex


def session_path(browser_id, directory=DEFAULT_SESSION_DIR):
    """File holding the persisted session of one browser."""
    if not browser_id or not BROWSER_ID_RE.match(browser_id):
        raise ValueError(f"Invalid browser id: {browser_id!r}")
    return os.path.join(directory, f"{browser_id}.json")


class ClientSession:
    def __init__(self, storage_path=None, token=None, user=None):
        self.storage_path = storage_path
        self.token = token
        self.user = user or {}
        self.transactions = []
        self.categories = []
        self.profile = {}

    @classmethod
    def hydrate(cls, storage_path):
        """Restore token and user from ``storage_path``; empty session if absent or unreadable."""
        session = cls(storage_path=storage_path)
        if not storage_path or not os.path.exists(storage_path):
            return session
        try:
            with open(storage_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session file {storage_path}: {e}")
            return session
        if isinstance(data, dict):
            session.token = data.get("token")
            session.user = data.get("user") or {}
        return session

    @classmethod
    def for_browser(cls, browser_id, directory=DEFAULT_SESSION_DIR):
        return cls.hydrate(session_path(browser_id, directory))

    @property
    def is_authenticated(self):
        return bool(self.token)

    def set_credentials(self, token, user):
        self.token = token
        self.user = dict(user)
        self.persist()

    def update_user(self, **fields):
        self.user.update({k: v for k, v in fields.items() if v})
        self.persist()

    def persist(self):
        if not self.storage_path:
            return
        os.makedirs(os.path.dirname(os.path.abspath(self.storage_path)), exist_ok=True)
        with open(self.storage_path, 'w', encoding='utf-8') as f:
            json.dump({"token": self.token, "user": self.user}, f)

    def clear(self):
        self.token = None
        self.user = {}
        self.transactions = []
        self.categories = []
        self.profile = {}
        if self.storage_path and os.path.exists(self.storage_path):
            os.remove(self.storage_path)
