"""Tests for category CRUD and the rename/delete sweeps."""

from backend import consistency, db


def create_category(client, headers, name, category_type="expense"):
    return client.post("/api/v1/categories/create", json={"name": name, "type": category_type}, headers=headers)


def create_tx(client, headers, category, amount=10, tx_type="expense", date="2024-01-01"):
    r = client.post("/api/v1/transactions/create",
                    json={"type": tx_type, "category": category, "amount": amount, "date": date},
                    headers=headers)
    assert r.status_code == 201, r.get_json()
    return r.get_json()


def list_tx(client, headers, **params):
    return client.get("/api/v1/transactions/lists", query_string=params, headers=headers).get_json()


class TestCategoryCrud:

    def test_create_normalizes_name(self, client, auth_a, user_a):
        r = create_category(client, auth_a, "  Groceries ", "Expense")
        body = r.get_json()
        assert r.status_code == 201
        assert body["name"] == "groceries"
        assert body["type"] == "expense"
        assert body["user"] == user_a[1]

    def test_create_requires_name_and_type(self, client, auth_a):
        assert client.post("/api/v1/categories/create", json={"name": "x"}, headers=auth_a).status_code == 400
        assert client.post("/api/v1/categories/create", json={"type": "income"}, headers=auth_a).status_code == 400

    def test_create_rejects_invalid_type(self, client, auth_a):
        assert create_category(client, auth_a, "gifts", "transfer").status_code == 400

    def test_duplicate_name_conflicts(self, client, auth_a):
        create_category(client, auth_a, "Food")
        r = create_category(client, auth_a, "FOOD", "income")
        assert r.status_code == 409

    def test_same_name_for_different_users(self, client, auth_a, auth_b):
        assert create_category(client, auth_a, "food").status_code == 201
        assert create_category(client, auth_b, "food").status_code == 201

    def test_lists_only_own_categories(self, client, auth_a, auth_b):
        create_category(client, auth_a, "salary", "income")
        create_category(client, auth_b, "rent")
        names = [c["name"] for c in client.get("/api/v1/categories/lists", headers=auth_a).get_json()]
        assert names == ["salary"]

    def test_update_type_only(self, client, auth_a):
        cat = create_category(client, auth_a, "bonus").get_json()
        r = client.put(f"/api/v1/categories/update/{cat['id']}", json={"type": "income"}, headers=auth_a)
        assert r.status_code == 200
        assert r.get_json()["name"] == "bonus"
        assert r.get_json()["type"] == "income"

    def test_update_unknown_category(self, client, auth_a):
        r = client.put("/api/v1/categories/update/999", json={"name": "x"}, headers=auth_a)
        assert r.status_code == 404

    def test_delete_unknown_category(self, client, auth_a):
        assert client.delete("/api/v1/categories/delete/999", headers=auth_a).status_code == 404


class TestRenameSweep:

    def test_rename_moves_all_matching_transactions(self, client, auth_a):
        cat = create_category(client, auth_a, "rent").get_json()
        for amount in (1200, 1300):
            create_tx(client, auth_a, "rent", amount=amount)
        create_tx(client, auth_a, "food")

        r = client.put(f"/api/v1/categories/update/{cat['id']}", json={"name": "Housing"}, headers=auth_a)
        assert r.get_json()["name"] == "housing"

        categories = [t["category"] for t in list_tx(client, auth_a)]
        assert "rent" not in categories
        assert categories.count("housing") == 2
        assert categories.count("food") == 1

    def test_rename_leaves_other_users_alone(self, client, auth_a, auth_b):
        cat = create_category(client, auth_a, "rent").get_json()
        create_tx(client, auth_b, "rent")
        client.put(f"/api/v1/categories/update/{cat['id']}", json={"name": "housing"}, headers=auth_a)
        assert [t["category"] for t in list_tx(client, auth_b)] == ["rent"]

    def test_same_name_update_touches_no_transactions(self, app, client, auth_a, user_a):
        cat = create_category(client, auth_a, "rent").get_json()
        create_tx(client, auth_a, "rent")
        with app.app_context():
            category, swept = consistency.update_category(cat["id"], user_a[1], name="rent")
        assert swept == 0
        assert category.name == "rent"
        assert list_tx(client, auth_a)[0]["category"] == "rent"


class TestDeleteSweep:

    def test_delete_repoints_to_sentinel(self, app, client, auth_a):
        cat = create_category(client, auth_a, "travel").get_json()
        create_tx(client, auth_a, "travel")
        create_tx(client, auth_a, "travel", amount=20)

        r = client.delete(f"/api/v1/categories/delete/{cat['id']}", headers=auth_a)
        assert r.status_code == 200
        assert r.get_json()["message"]
        assert [t["category"] for t in list_tx(client, auth_a)] == ["Uncategorized", "Uncategorized"]
        with app.app_context():
            assert db.query_db("SELECT * FROM categories WHERE id=?", (cat["id"],), one=True) is None

    def test_rent_housing_scenario(self, client, auth_a):
        cat = create_category(client, auth_a, "rent").get_json()
        tx = create_tx(client, auth_a, "rent", amount=1200, date="2024-01-01")

        client.put(f"/api/v1/categories/update/{cat['id']}", json={"name": "housing"}, headers=auth_a)
        assert list_tx(client, auth_a)[0]["category"] == "housing"

        client.delete(f"/api/v1/categories/delete/{cat['id']}", headers=auth_a)
        after = list_tx(client, auth_a)[0]
        assert after["id"] == tx["id"]
        assert after["category"] == "Uncategorized"

    def test_sweeps_match_labels_case_insensitively(self, client, auth_a):
        cat = create_category(client, auth_a, "rent").get_json()
        create_tx(client, auth_a, "Rent")
        create_tx(client, auth_a, "RENT", amount=20)

        client.put(f"/api/v1/categories/update/{cat['id']}", json={"name": "housing"}, headers=auth_a)
        assert [t["category"] for t in list_tx(client, auth_a)] == ["housing", "housing"]

        client.delete(f"/api/v1/categories/delete/{cat['id']}", headers=auth_a)
        assert [t["category"] for t in list_tx(client, auth_a)] == ["Uncategorized", "Uncategorized"]

    def test_sweep_leaves_uncategorized_alone(self, client, auth_a):
        cat = create_category(client, auth_a, "uncategorized").get_json()
        create_tx(client, auth_a, "Uncategorized")

        r = client.put(f"/api/v1/categories/update/{cat['id']}", json={"name": "misc"}, headers=auth_a)
        assert r.status_code == 200
        assert list_tx(client, auth_a)[0]["category"] == "Uncategorized"


class TestOwnership:

    def test_other_user_cannot_rename(self, client, auth_a, auth_b):
        cat = create_category(client, auth_a, "rent").get_json()
        create_tx(client, auth_a, "rent")
        r = client.put(f"/api/v1/categories/update/{cat['id']}", json={"name": "hacked"}, headers=auth_b)
        assert r.status_code == 403
        assert client.get("/api/v1/categories/lists", headers=auth_a).get_json()[0]["name"] == "rent"
        assert list_tx(client, auth_a)[0]["category"] == "rent"

    def test_other_user_cannot_delete(self, client, auth_a, auth_b):
        cat = create_category(client, auth_a, "rent").get_json()
        create_tx(client, auth_a, "rent")
        r = client.delete(f"/api/v1/categories/delete/{cat['id']}", headers=auth_b)
        assert r.status_code == 403
        assert len(client.get("/api/v1/categories/lists", headers=auth_a).get_json()) == 1
        assert list_tx(client, auth_a)[0]["category"] == "rent"


class TestSweepAtomicity:

    def test_failed_delete_rolls_back_sweep(self, app, client, auth_a):
        cat = create_category(client, auth_a, "travel").get_json()
        create_tx(client, auth_a, "travel")
        with app.app_context():
            db.get_db().execute(
                "CREATE TRIGGER block_category_delete BEFORE DELETE ON categories "
                "BEGIN SELECT RAISE(ABORT, 'delete blocked'); END;"
            )

        r = client.delete(f"/api/v1/categories/delete/{cat['id']}", headers=auth_a)
        assert r.status_code == 500
        assert "delete blocked" in r.get_json()["message"]
        assert list_tx(client, auth_a)[0]["category"] == "travel"
        assert len(client.get("/api/v1/categories/lists", headers=auth_a).get_json()) == 1

    def test_failed_rename_rolls_back_category(self, app, client, auth_a):
        cat = create_category(client, auth_a, "rent").get_json()
        create_tx(client, auth_a, "rent")
        with app.app_context():
            db.get_db().execute(
                "CREATE TRIGGER block_tx_update BEFORE UPDATE ON transactions "
                "BEGIN SELECT RAISE(ABORT, 'sweep blocked'); END;"
            )

        r = client.put(f"/api/v1/categories/update/{cat['id']}", json={"name": "housing"}, headers=auth_a)
        assert r.status_code == 500
        assert client.get("/api/v1/categories/lists", headers=auth_a).get_json()[0]["name"] == "rent"
        assert list_tx(client, auth_a)[0]["category"] == "rent"
