# backend/modules/tables/tests/test_table_routes.py

"""
API tests for table sessions, payments and cart drafts
"""

from fastapi import status

from modules.settings.services.settings_service import TABLE_COUNT_KEY
from modules.settings.models.settings_models import RestaurantSetting


class TestTableStatusEndpoint:
    def test_default_floor(self, client, factories):
        factories.TableSessionFactory(table_id=4)

        response = client.get("/api/tables/status")

        assert response.status_code == status.HTTP_200_OK
        tables = response.json()
        assert len(tables) == 25
        assert tables[3]["status"] == "occupied"
        assert tables[0]["status"] == "empty"

    def test_follows_configured_table_count(self, client, db_session):
        db_session.add(RestaurantSetting(setting_key=TABLE_COUNT_KEY, setting_value="8"))
        db_session.commit()
        assert len(client.get("/api/tables/status").json()) == 8


class TestSessionEndpoints:
    def test_create_session(self, client, publisher):
        response = client.post(
            "/api/tables/2/session",
            json={"customerName": "Maya", "customerPhone": "9841000009"},
        )
        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["customer_name"] == "Maya"
        assert publisher.names == ["tableOccupied"]

    def test_create_session_without_body(self, client):
        response = client.post("/api/tables/2/session")
        assert response.status_code == status.HTTP_201_CREATED

    def test_occupied_table_conflict(self, client, factories):
        factories.TableSessionFactory(table_id=2)

        response = client.post("/api/tables/2/session", json={})

        assert response.status_code == status.HTTP_409_CONFLICT
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == "TABLE_OCCUPIED"
        assert body["path"] == "/api/tables/2/session"

    def test_get_active_session(self, client, factories):
        session = factories.TableSessionFactory(table_id=2)
        response = client.get("/api/tables/2/session")
        assert response.json()["id"] == session.id
        assert client.get("/api/tables/3/session").status_code == 404

    def test_update_status(self, client, factories):
        factories.TableSessionFactory(table_id=2)
        response = client.put(
            "/api/tables/2/session/status",
            json={"status": "dining", "totalAmount": 320},
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "dining"
        assert response.json()["total_amount"] == 320

    def test_clear_requires_session(self, client):
        response = client.post("/api/tables/2/clear")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_clear_then_reoccupy(self, client, factories):
        factories.TableSessionFactory(table_id=2)
        factories.OrderFactory(table_id=2)

        response = client.post("/api/tables/2/clear")
        assert response.json()["movedToHistory"] == 1

        assert client.post("/api/tables/2/session").status_code == 201

    def test_clear_table_without_session(self, client, factories, publisher):
        factories.OrderFactory(table_id=2)
        response = client.post("/api/clear-table/2")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["movedToHistory"] == 1
        assert publisher.names == ["tableCleared"]

    def test_history(self, client, factories):
        factories.TableSessionFactory(table_id=2, status="cleared")
        factories.TableSessionFactory(table_id=2)
        history = client.get("/api/tables/2/history").json()
        assert len(history) == 2
        assert {"order_count", "total_paid"} <= set(history[0])


class TestPaymentEndpoints:
    def test_payment_flow(self, client, factories, publisher):
        factories.TableSessionFactory(table_id=6)

        created = client.post(
            "/api/tables/6/payments",
            json={"amount": 480, "paymentMethod": "digital", "transactionId": "TX-9"},
        )
        assert created.status_code == status.HTTP_201_CREATED
        payment_id = created.json()["id"]

        completed = client.put(
            f"/api/payments/{payment_id}/status", json={"status": "completed"}
        )
        assert completed.status_code == status.HTTP_200_OK
        assert completed.json()["processed_at"] is not None

        payments = client.get("/api/tables/6/payments").json()
        assert [p["payment_status"] for p in payments] == ["completed"]
        assert publisher.names == ["paymentInitiated", "paymentCompleted"]

        again = client.put(
            f"/api/payments/{payment_id}/status", json={"status": "failed"}
        )
        assert again.status_code == status.HTTP_409_CONFLICT

    def test_amount_must_be_positive(self, client, factories):
        factories.TableSessionFactory(table_id=6)
        response = client.post("/api/tables/6/payments", json={"amount": 0})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_singular_path(self, client, factories):
        factories.TableSessionFactory(table_id=6)
        response = client.post("/api/tables/6/payment", json={"amount": 10})
        assert response.status_code == status.HTTP_201_CREATED


class TestCartDraftEndpoints:
    def test_missing_draft(self, client):
        response = client.get("/api/table-session/3")
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"exists": False, "cartItems": []}

    def test_save_and_read_draft(self, client):
        cart = [{"name": "Chicken Momo", "price": 140, "quantity": 2}]

        saved = client.post("/api/table-session/3", json={"cartItems": cart})
        assert saved.json()["success"] is True

        response = client.get("/api/table-session/3")
        assert response.json() == {"exists": True, "cartItems": cart}

    def test_cache_stats_and_clear(self, client):
        client.post("/api/table-session/3", json={"cartItems": [{"name": "Momo"}]})
        client.post("/api/table-session/4", json={"cartItems": []})

        stats = client.get("/api/cache/stats").json()
        assert stats["backend"] == "memory"
        assert stats["active_drafts"] == 2
        assert stats["table_ids"] == [3, 4]

        cleared = client.post("/api/clear-table-sessions").json()
        assert cleared["cleared"] == 2
        assert client.get("/api/cache/stats").json()["active_drafts"] == 0

    def test_order_discards_draft(self, client):
        client.post("/api/table-session/5", json={"cartItems": [{"name": "Momo"}]})
        client.post(
            "/api/order",
            json={
                "customerName": "Sita",
                "phone": "9841000001",
                "tableId": 5,
                "items": [{"name": "Momo", "price": 140, "quantity": 1}],
            },
        )
        assert client.get("/api/table-session/5").json()["exists"] is False
