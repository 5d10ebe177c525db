# backend/modules/orders/tests/test_order_routes.py

"""
API tests for the order endpoints
"""

from datetime import datetime
from decimal import Decimal

import pytest
from fastapi import status

from core.config import settings
from modules.tables.models.table_models import TableSession
from ..models.order_models import Order, OrderItem

CART = {
    "customerName": "Sita Sharma",
    "phone": "9841000001",
    "tableId": 5,
    "items": [
        {"id": 1, "name": "Chicken Momo", "category": "Momo",
         "price": 140, "quantity": 2},
        {"id": 7, "name": "Veg Chowmein", "category": "Noodles",
         "price": 120, "quantity": 1},
    ],
}


class TestCreateOrderEndpoint:
    def test_create_dine_in_order(self, client, publisher):
        response = client.post("/api/order", json=CART)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["success"] is True
        order = data["order"]
        assert order["order_number"] in data["message"]
        assert order["subtotal"] == 400
        assert order["total"] == 400
        assert order["order_type"] == "dine-in"
        assert len(order["items"]) == 2
        assert publisher.names == ["newOrder"]

    def test_missing_items(self, client, db_session):
        response = client.post("/api/order", json={**CART, "items": []})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == "VALIDATION_ERROR"
        assert "items" in body["error"]
        assert db_session.query(Order).count() == 0

    def test_bad_quantity(self, client):
        cart = {**CART, "items": [{"name": "Momo", "price": 140, "quantity": 0}]}
        response = client.post("/api/order", json=cart)
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_snapshot_keeps_item_ids(self, client):
        response = client.post("/api/order", json=CART)
        items = response.json()["order"]["items"]
        assert [item["menu_item_id"] for item in items] == ["1", "7"]

    def test_field_names_are_accepted(self, client):
        cart = {
            "customer_name": "Sita Sharma",
            "phone": "9841000001",
            "table_id": 5,
            "items": [{"name": "Chicken Momo", "price": 140, "quantity": 2}],
        }
        response = client.post("/api/order", json=cart)
        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["order"]["customer_name"] == "Sita Sharma"

    def test_delivery_order_from_app(self, client, factories):
        factories.DeliveryZoneFactory(max_distance=Decimal("1"), delivery_fee=Decimal("0"))
        factories.DeliveryZoneFactory(max_distance=Decimal("2"), delivery_fee=Decimal("30"))
        body = {
            "customerName": "Ram Thapa",
            "phone": "9841000002",
            "orderType": "delivery",
            "tableId": "Delivery",
            "address": "Suryabinayak, Bhaktapur",
            "coordinates": {
                "latitude": 27.6845, "longitude": 85.4298, "landmark": "Near the temple",
            },
            "deliveryNotes": "Ring twice",
            "items": [{"name": "Thakali Set", "price": 250, "quantity": 1}],
        }

        response = client.post("/api/order", json=body)

        assert response.status_code == status.HTTP_201_CREATED
        order = response.json()["order"]
        assert order["order_type"] == "delivery"
        assert order["table_id"] is None
        assert order["delivery_address"] == "Suryabinayak, Bhaktapur"
        assert order["delivery_landmark"] == "Near the temple"
        assert order["notes"] == "Ring twice"
        assert order["delivery_latitude"] == pytest.approx(27.6845)
        assert order["delivery_fee"] == 30
        assert order["total"] == 280

    def test_dine_in_then_clear_table(self, client, factories):
        """An occupied table's order is moved to history when it is cleared"""
        factories.TableSessionFactory(table_id=5)
        client.post("/api/order", json=CART)

        response = client.post("/api/clear-table/5")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["movedToHistory"] == 1


class TestListOrders:
    def test_newest_first_with_filters(self, client, factories):
        first = factories.OrderFactory(table_id=1)
        factories.OrderFactory(table_id=2, status="completed")
        factories.OrderFactory(
            table_id=None, order_type="delivery", delivery_address="Bhaktapur"
        )

        all_orders = client.get("/api/orders").json()
        assert len(all_orders) == 3
        assert all_orders[-1]["id"] == first.id

        pending = client.get("/api/orders?status=pending").json()
        assert len(pending) == 2

        delivery = client.get("/api/orders?orderType=delivery").json()
        assert [o["order_type"] for o in delivery] == ["delivery"]

        table_two = client.get("/api/orders?tableId=2").json()
        assert [o["status"] for o in table_two] == ["completed"]

        dine_in = client.get("/api/orders?orderType=dine-in").json()
        assert len(dine_in) == 2

    def test_pagination(self, client, factories):
        for _ in range(5):
            factories.OrderFactory()
        assert len(client.get("/api/orders?limit=2").json()) == 2
        assert len(client.get("/api/orders?limit=2&offset=4").json()) == 1

    def test_unknown_status_filter(self, client):
        response = client.get("/api/orders?status=lost")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_get_single_order(self, client, factories):
        item = factories.OrderItemFactory()
        response = client.get(f"/api/orders/{item.order_id}")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["items"][0]["id"] == item.id

    def test_get_missing_order(self, client):
        response = client.get("/api/orders/404")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error_code"] == "NOT_FOUND"


class TestUpdateStatusEndpoint:
    def test_update_status(self, client, factories, publisher):
        order = factories.OrderFactory()

        response = client.put(
            f"/api/orders/{order.id}/status", json={"status": "preparing"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["order"]["status"] == "preparing"
        assert publisher.names == ["orderStatusUpdated"]

    def test_status_required(self, client, factories):
        order = factories.OrderFactory()
        response = client.put(f"/api/orders/{order.id}/status", json={})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_invalid_transition(self, client, factories):
        order = factories.OrderFactory(status="completed")
        response = client.put(
            f"/api/orders/{order.id}/status", json={"status": "pending"}
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "INVALID_STATUS_TRANSITION"


class TestDeleteOrder:
    def test_wrong_password_keeps_order(self, client, db_session, factories, publisher):
        item = factories.OrderItemFactory()

        response = client.request(
            "DELETE", f"/api/order/{item.order_id}", json={"password": "guess"}
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert db_session.query(Order).count() == 1
        assert db_session.query(OrderItem).count() == 1
        assert publisher.events == []

    def test_missing_password(self, client, factories):
        order = factories.OrderFactory()
        response = client.request("DELETE", f"/api/order/{order.id}", json={})
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_delete_removes_items(self, client, db_session, factories, publisher):
        item = factories.OrderItemFactory()
        order_number = item.order.order_number

        response = client.request(
            "DELETE",
            f"/api/order/{item.order_id}",
            json={"password": settings.order_delete_password},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["deletedOrder"] == order_number
        assert db_session.query(Order).count() == 0
        assert db_session.query(OrderItem).count() == 0
        assert publisher.names == ["orderDeleted"]

    def test_delete_missing_order(self, client):
        response = client.request(
            "DELETE", "/api/order/404", json={"password": settings.order_delete_password}
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_delete_keeps_table_session(self, client, db_session, factories):
        session = factories.TableSessionFactory(table_id=1)
        order = factories.OrderFactory(table_session=session)

        client.request(
            "DELETE", f"/api/order/{order.id}",
            json={"password": settings.order_delete_password},
        )

        assert db_session.query(TableSession).count() == 1


class TestOrderHistory:
    @pytest.fixture
    def history(self, factories):
        factories.OrderFactory(
            customer_phone="9841000001", status="completed",
            created_at=datetime(2026, 3, 1, 12),
        )
        factories.OrderFactory(
            customer_phone="9841000001", status="cancelled",
            created_at=datetime(2026, 3, 2, 23, 30),
        )
        factories.OrderFactory(
            customer_phone="9841000002", status="completed",
            created_at=datetime(2026, 3, 3, 8),
        )
        factories.OrderFactory(
            customer_phone="9841000001", status="pending",
            created_at=datetime(2026, 3, 2, 10),
        )

    def test_only_finished_orders(self, client, history):
        orders = client.get("/api/order-history").json()
        assert len(orders) == 3
        assert {o["status"] for o in orders} == {"completed", "cancelled"}

    def test_filter_by_phone(self, client, history):
        orders = client.get("/api/order-history?customerPhone=9841000001").json()
        assert len(orders) == 2

    def test_end_date_is_inclusive(self, client, history):
        orders = client.get(
            "/api/order-history?startDate=2026-03-02&endDate=2026-03-02"
        ).json()
        assert [o["status"] for o in orders] == ["cancelled"]


class TestAdminAuth:
    def test_correct_password(self, client):
        response = client.post(
            "/api/admin/auth", json={"password": settings.admin_password}
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["success"] is True

    def test_wrong_password(self, client):
        response = client.post("/api/admin/auth", json={"password": "nope"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["success"] is False
