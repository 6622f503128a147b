# frontend/api_client.py
import logging
import os
from concurrent.futures import ThreadPoolExecutor

import requests

logger = logging.getLogger("expense-tracker-client")

API_BASE = os.environ.get("EXPENSE_API_BASE", "http://localhost:5000/api/v1")


class ApiClientError(Exception):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SessionExpiredError(ApiClientError):
    """The server rejected the token; the session has been cleared."""


def safe_json(resp):
    try:
        return resp.json()
    except ValueError:
        return None


class ApiClient:
    """Thin wrapper over the REST API bound to one ``ClientSession``."""

    def __init__(self, session, base_url=API_BASE, timeout=10):
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    # ---------------- Transport ----------------
    def request(self, method, path, json=None, params=None, auth=True):
        headers = {"Content-Type": "application/json"}
        if auth and self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        url = self.base_url + path

        try:
            response = requests.request(method, url, headers=headers, json=json,
                                        params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ApiClientError(f"Connection failed: {e}")

        payload = safe_json(response)
        if response.status_code == 401 and auth:
            self.session.clear()
            raise SessionExpiredError("Session expired. Please login again.", 401)
        if not response.ok:
            message = (payload or {}).get("message") if isinstance(payload, dict) else None
            raise ApiClientError(message or f"Request failed ({response.status_code})", response.status_code)
        return payload

    # ---------------- Users ----------------
    def register(self, username, email, password):
        return self.request("POST", "/users/register", auth=False,
                            json={"username": username, "email": email, "password": password})

    def login(self, email, password):
        data = self.request("POST", "/users/login", auth=False,
                            json={"email": email, "password": password})
        self.session.set_credentials(data["token"], {
            "id": data.get("id"),
            "email": data.get("email"),
            "username": data.get("username"),
        })
        return data

    def logout(self):
        self.session.clear()

    def get_profile(self):
        return self.request("GET", "/users/profile")

    def update_profile(self, username=None, email=None):
        data = self.request("PUT", "/users/update-profile", json={"username": username, "email": email})
        updated = data.get("updatedUser") or {}
        self.session.update_user(username=updated.get("username"), email=updated.get("email"))
        self.session.profile = {"username": updated.get("username"), "email": updated.get("email")}
        return data

    def change_password(self, new_password):
        return self.request("PUT", "/users/change-password", json={"newPassword": new_password})

    # ---------------- Transactions ----------------
    def list_transactions(self, start_date=None, end_date=None, tx_type=None, category=None):
        params = {
            "startDate": start_date.isoformat() if hasattr(start_date, "isoformat") else start_date,
            "endDate": end_date.isoformat() if hasattr(end_date, "isoformat") else end_date,
            "type": tx_type,
            "category": category,
        }
        return self.request("GET", "/transactions/lists",
                            params={k: v for k, v in params.items() if v}) or []

    def create_transaction(self, **fields):
        return self.request("POST", "/transactions/create", json=fields)

    def update_transaction(self, tx_id, **fields):
        return self.request("PUT", f"/transactions/update/{tx_id}", json=fields)

    def delete_transaction(self, tx_id):
        return self.request("DELETE", f"/transactions/delete/{tx_id}")

    # ---------------- Categories ----------------
    def list_categories(self):
        return self.request("GET", "/categories/lists") or []

    def create_category(self, name, category_type):
        return self.request("POST", "/categories/create", json={"name": name, "type": category_type})

    def update_category(self, category_id, name=None, category_type=None):
        return self.request("PUT", f"/categories/update/{category_id}",
                            json={"name": name, "type": category_type})

    def delete_category(self, category_id):
        return self.request("DELETE", f"/categories/delete/{category_id}")

    # ---------------- Loading ----------------
    def load_all(self):
        """Fetch transactions, categories and profile concurrently.

        All three must finish before the session is updated; the first error
        is re-raised.
        """
        with ThreadPoolExecutor(max_workers=3) as pool:
            tx_future = pool.submit(self.list_transactions)
            cat_future = pool.submit(self.list_categories)
            profile_future = pool.submit(self.get_profile)
            transactions = tx_future.result()
            categories = cat_future.result()
            profile = profile_future.result()

        self.session.transactions = transactions
        self.session.categories = categories
        self.session.profile = profile or {}
        return self.session
