"""
Integration tests for the REST and GraphQL APIs.
"""
import json
from uuid import uuid4

from store.domain.order import AUTO_ACCEPT
from store.infra.models import BookORM, OrderORM
from store.test.base import BookstoreTestCase


class RestAPITest(BookstoreTestCase):
    """Integration tests for the JSON API."""

    def setUp(self):
        super().setUp()
        self.book = self.make_book(title="Dune", price="10.00", inventory=20)

    def call(self, method, path, user=None, data=None, **headers):
        if user is not None:
            headers["HTTP_X_USER_ID"] = str(user.id)
        kwargs = {"content_type": "application/json", **headers}
        if data is not None:
            kwargs["data"] = json.dumps(data)
        response = getattr(self.client, method)(path, **kwargs)
        return response, json.loads(response.content)

    def test_checkout_and_pickup_flow(self):
        """Test cart, checkout and staff pickup end to end over REST."""
        response, body = self.call("post", "/api/Cart", self.member, {"bookId": str(self.book.id), "quantity": 5})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(body["item"]["quantity"], 5)

        response, body = self.call("get", "/api/Cart", self.member)
        self.assertEqual(body["cart"]["totalItems"], 5)
        self.assertEqual(body["cart"]["totalPrice"], "50.00")

        response, body = self.call("post", "/api/Order", self.member, {"note": "Evening pickup"})
        self.assertEqual(response.status_code, 201)
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "Order created successfully")
        order = body["order"]
        self.assertEqual(order["subtotal"], "50.00")
        self.assertEqual(order["totalAmount"], "47.50")
        self.assertEqual(order["discountDescription"], "5% volume discount")
        self.assertEqual(order["status"], "PENDING")
        self.assertIn("X-Request-ID", response)

        response, body = self.call(
            "post",
            "/api/Order/process",
            self.staff,
            {"claimCode": order["claimCode"], "membershipId": str(self.member.id)},
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(body["order"]["isProcessed"])

        response, body = self.call(
            "post",
            "/api/Order/process",
            self.staff,
            {"claimCode": order["claimCode"], "membershipId": str(self.member.id)},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(body, {"success": False, "message": "Order is already processed"})

    def test_missing_identity_is_401(self):
        """Test that a missing, malformed or unknown X-User-ID is rejected with 401."""
        response, body = self.call("get", "/api/Order")
        self.assertEqual(response.status_code, 401)
        self.assertFalse(body["success"])

        response, _ = self.call("get", "/api/Order", HTTP_X_USER_ID="not-a-uuid")
        self.assertEqual(response.status_code, 401)

        response, _ = self.call("get", "/api/Order", HTTP_X_USER_ID=str(uuid4()))
        self.assertEqual(response.status_code, 401)

    def test_status_codes(self):
        """Test the HTTP status for each failure kind."""
        response, body = self.call("post", "/api/Order", self.member)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(body["message"], "Cart is empty")

        response, body = self.call("post", "/api/Order", self.staff)
        self.assertEqual(response.status_code, 403)

        response, body = self.call("get", f"/api/Order/{uuid4()}", self.member)
        self.assertEqual(response.status_code, 404)

        response, body = self.call("get", "/api/Cart", self.admin)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(body["message"], "Admin users cannot use cart functionality")

    def test_malformed_body(self):
        """Test that malformed JSON and bad fields are answered with 400."""
        response = self.client.post(
            "/api/Cart",
            data="{not json",
            content_type="application/json",
            HTTP_X_USER_ID=str(self.member.id),
        )
        self.assertEqual(response.status_code, 400)

        response, body = self.call("post", "/api/Cart", self.member, {"bookId": "nope"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(body["message"], "bookId must be a valid id")

        response, body = self.call("post", "/api/Order/process", self.staff, {"claimCode": "ABCDEFGH"})
        self.assertEqual(response.status_code, 400)

    def test_cancel_and_view(self):
        """Test viewing and cancelling an order over REST."""
        order = self.place_order(self.member, self.book, 2)
        other = self.make_user("other", "Member")

        response, _ = self.call("get", f"/api/Order/{order.id}", other)
        self.assertEqual(response.status_code, 403)
        response, body = self.call("get", f"/api/Order/{order.id}", self.staff)
        self.assertEqual(body["order"]["claimCode"], order.claim_code)

        response, _ = self.call("post", f"/api/Order/{order.id}/cancel", other)
        self.assertEqual(response.status_code, 403)
        response, body = self.call("post", f"/api/Order/{order.id}/cancel", self.member)
        self.assertEqual(response.status_code, 200)
        self.assertTrue(body["order"]["isCancelled"])
        self.book.refresh_from_db()
        self.assertEqual(self.book.inventory_count, 20)

    def test_order_listings(self):
        """Test member and staff order listings."""
        order = self.place_order(self.member, self.book, 1)
        response, body = self.call("get", "/api/Order", self.member)
        self.assertEqual([item["id"] for item in body["orders"]], [str(order.id)])

        response, body = self.call("get", "/api/Order/all?processed=false", self.staff)
        self.assertEqual(len(body["orders"]), 1)
        response, body = self.call("get", "/api/Order/all?processed=true", self.staff)
        self.assertEqual(body["orders"], [])
        response, _ = self.call("get", "/api/Order/all", self.member)
        self.assertEqual(response.status_code, 403)

    def test_cart_line_endpoints(self):
        """Test updating and removing single cart lines."""
        _, body = self.call("post", "/api/Cart", self.member, {"bookId": str(self.book.id)})
        line_id = body["item"]["id"]

        response, body = self.call("put", f"/api/Cart/{line_id}", self.member, {"quantity": 4})
        self.assertEqual(body["item"]["quantity"], 4)
        response, body = self.call("put", f"/api/Cart/{line_id}", self.member, {"quantity": 0})
        self.assertEqual(response.status_code, 400)

        response, body = self.call("delete", f"/api/Cart/{line_id}", self.member)
        self.assertEqual(body["message"], "Item removed from cart")
        response, body = self.call("delete", "/api/Cart", self.member)
        self.assertEqual(body["message"], "Cart cleared")

    def test_books_endpoints(self):
        """Test catalog browsing and admin book management over REST."""
        response, body = self.call("get", "/api/Books?search=dune")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(body["totalCount"], 1)
        self.assertEqual(body["books"][0]["price"], "10.00")

        response, body = self.call("get", f"/api/Books/{self.book.id}")
        self.assertEqual(body["book"]["title"], "Dune")

        response, body = self.call(
            "post", "/api/Books", self.admin, {"title": "Emma", "author": "Jane Austen", "price": "8.00"}
        )
        self.assertEqual(response.status_code, 201)
        book_id = body["book"]["id"]

        response, _ = self.call("post", "/api/Books", self.member, {"title": "X", "author": "Y", "price": "1"})
        self.assertEqual(response.status_code, 403)
        response, _ = self.call("post", "/api/Books", data={"title": "X", "author": "Y", "price": "1"})
        self.assertEqual(response.status_code, 401)

        response, body = self.call("put", f"/api/Books/{book_id}", self.admin, {"price": "9.00"})
        self.assertEqual(body["book"]["price"], "9.00")
        response, _ = self.call("delete", f"/api/Books/{book_id}", self.admin)
        self.assertEqual(response.status_code, 200)
        self.assertFalse(BookORM.objects.filter(id=book_id).exists())

        response, body = self.call("get", "/api/Books/stats", self.admin)
        self.assertEqual(body["stats"]["totalBooks"], 1)

    def test_review_endpoints(self):
        """Test the purchase check and review endpoints."""
        order = self.place_order(self.member, self.book, 1)
        response, body = self.call("get", f"/api/Review/check-purchase/{self.book.id}", self.member)
        self.assertFalse(body["hasPurchased"])

        self.order_service.process_order(self.staff.id, order.claim_code, AUTO_ACCEPT)
        response, body = self.call("get", f"/api/Review/check-purchase/{self.book.id}", self.member)
        self.assertTrue(body["hasPurchased"])

        response, body = self.call(
            "post", "/api/Review", self.member, {"bookId": str(self.book.id), "rating": 5, "comment": "Classic"}
        )
        self.assertEqual(response.status_code, 201)
        review_id = body["review"]["id"]
        self.assertEqual(body["review"]["memberName"], "Ada Reader")

        response, body = self.call("get", f"/api/Review/book/{self.book.id}")
        self.assertEqual(len(body["reviews"]), 1)

        response, _ = self.call("delete", f"/api/Review/{review_id}", self.member)
        self.assertEqual(response.status_code, 200)

    def test_non_numeric_quantity_is_bad_request(self):
        """Test that integer fields reject text int() cannot read with 400, not 500."""
        _, body = self.call("post", "/api/Cart", self.member, {"bookId": str(self.book.id)})
        line_id = body["item"]["id"]

        for quantity in ("--5", "²", "٤", "5.0", "", True, None):
            response, body = self.call("put", f"/api/Cart/{line_id}", self.member, {"quantity": quantity})
            self.assertEqual(response.status_code, 400, quantity)
            self.assertEqual(body, {"success": False, "message": "quantity must be an integer"})

        response, body = self.call("put", f"/api/Cart/{line_id}", self.member, {"quantity": " 3 "})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(body["item"]["quantity"], 3)

    def test_bookmark_endpoints(self):
        """Test listing, adding, checking and removing bookmarks over REST."""
        response, body = self.call("post", "/api/Bookmark", self.member, {"bookId": str(self.book.id)})
        self.assertEqual(response.status_code, 201)
        bookmark_id = body["bookmark"]["id"]
        self.assertEqual(body["bookmark"]["book"]["title"], "Dune")

        response, body = self.call("post", "/api/Bookmark", self.member, {"bookId": str(self.book.id)})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(body["message"], "Book is already bookmarked")

        response, body = self.call("get", "/api/Bookmark", self.member)
        self.assertEqual([item["id"] for item in body["bookmarks"]], [bookmark_id])
        response, body = self.call("get", f"/api/Bookmark/Check/{self.book.id}", self.member)
        self.assertTrue(body["isBookmarked"])

        response, _ = self.call("delete", f"/api/Bookmark/{bookmark_id}", self.member)
        self.assertEqual(response.status_code, 200)
        response, body = self.call("get", f"/api/Bookmark/Check/{self.book.id}", self.member)
        self.assertFalse(body["isBookmarked"])

        self.call("post", "/api/Bookmark", self.member, {"bookId": str(self.book.id)})
        response, body = self.call("delete", f"/api/Bookmark/ByBookId/{self.book.id}", self.member)
        self.assertEqual(body["message"], "Bookmark removed successfully")
        response, _ = self.call("delete", f"/api/Bookmark/ByBookId/{self.book.id}", self.member)
        self.assertEqual(response.status_code, 404)

    def test_bookmark_access(self):
        """Test bookmark status codes for Admins, anonymous callers and bad ids."""
        response, body = self.call("get", "/api/Bookmark", self.admin)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(body["message"], "Admin users cannot use bookmarks")

        response, _ = self.call("get", "/api/Bookmark")
        self.assertEqual(response.status_code, 401)

        response, body = self.call("post", "/api/Bookmark", self.member, {"bookId": "nope"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(body["message"], "bookId must be a valid id")

        response, _ = self.call("post", "/api/Bookmark", self.member, {"bookId": str(uuid4())})
        self.assertEqual(response.status_code, 404)

    def test_activity_feed(self):
        """Test that a placed order shows up in the public activity feed."""
        with self.captureOnCommitCallbacks(execute=True):
            self.call("post", "/api/Cart", self.member, {"bookId": str(self.book.id)})
            self.call("post", "/api/Order", self.member)

        response, body = self.call("get", "/api/activity?limit=5")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(body["events"][0]["message"], "Ada Reader just purchased Dune!")


class GraphQLAPITest(BookstoreTestCase):
    """Integration tests for GraphQL API."""

    def setUp(self):
        super().setUp()
        self.book = self.make_book(price="10.00")

    def graphql(self, query, user=None, variables=None):
        headers = {"HTTP_X_USER_ID": str(user.id)} if user else {}
        response = self.client.post(
            "/graphql/",
            data={"query": query, "variables": variables or {}},
            content_type="application/json",
            **headers,
        )
        return response, json.loads(response.content)

    def test_create_order_mutation(self):
        """Test createOrder mutation."""
        self.fill_cart(self.member, self.book, 2)
        response, data = self.graphql(
            """
            mutation Create($note: String) {
                createOrder(note: $note) {
                    success
                    message
                    errorKind
                    order { id claimCode totalAmount status items { bookTitle quantity unitPrice } }
                }
            }
            """,
            self.member,
            {"note": "hi"},
        )
        self.assertEqual(response.status_code, 200)
        payload = data["data"]["createOrder"]
        self.assertTrue(payload["success"])
        self.assertIsNone(payload["errorKind"])
        self.assertEqual(payload["order"]["totalAmount"], "20.00")
        self.assertEqual(payload["order"]["status"], "PENDING")
        self.assertEqual(payload["order"]["items"][0]["unitPrice"], "10.00")
        self.assertTrue(OrderORM.objects.filter(id=payload["order"]["id"]).exists())

    def test_failed_mutation_payload(self):
        """Test that a failed mutation returns success false with a message."""
        response, data = self.graphql(
            "mutation { createOrder { success message errorKind order { id } } }",
            self.member,
        )
        payload = data["data"]["createOrder"]
        self.assertFalse(payload["success"])
        self.assertEqual(payload["message"], "Cart is empty")
        self.assertEqual(payload["errorKind"], "INVALID_STATE")
        self.assertIsNone(payload["order"])

    def test_process_and_query(self):
        """Test processOrder mutation and order query."""
        order = self.place_order(self.member, self.book, 1)
        _, data = self.graphql(
            """
            mutation Process($code: String!, $member: String!) {
                processOrder(claimCode: $code, membershipId: $member) { success order { isProcessed } }
            }
            """,
            self.staff,
            {"code": order.claim_code, "member": str(self.member.id)},
        )
        self.assertTrue(data["data"]["processOrder"]["order"]["isProcessed"])

        _, data = self.graphql(
            "query Get($id: UUID!) { order(id: $id) { claimCode isProcessed } }",
            self.member,
            {"id": str(order.id)},
        )
        self.assertEqual(data["data"]["order"]["claimCode"], order.claim_code)

        _, data = self.graphql("{ allOrders(processed: true) { id } }", self.admin)
        self.assertEqual(len(data["data"]["allOrders"]), 1)

        _, data = self.graphql("{ myOrders { id } }", self.member)
        self.assertEqual(data["data"]["myOrders"], [{"id": str(order.id)}])

    def test_cancel_mutation(self):
        """Test cancelOrder mutation."""
        order = self.place_order(self.member, self.book, 1)
        _, data = self.graphql(
            "mutation Cancel($id: UUID!) { cancelOrder(orderId: $id) { success order { isCancelled } } }",
            self.member,
            {"id": str(order.id)},
        )
        self.assertTrue(data["data"]["cancelOrder"]["order"]["isCancelled"])

    def test_forbidden_query_reports_error(self):
        """Test that a forbidden query reports a GraphQL error with its kind."""
        order = self.place_order(self.member, self.book, 1)
        other = self.make_user("other", "Member")
        response, data = self.graphql(
            "query Get($id: UUID!) { order(id: $id) { id } }",
            other,
            {"id": str(order.id)},
        )
        self.assertIsNone(data["data"]["order"])
        self.assertEqual(data["errors"][0]["extensions"]["errorKind"], "FORBIDDEN")

    def test_requires_identity(self):
        """Test that GraphQL operations need a caller."""
        response, data = self.graphql("{ myOrders { id } }")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(data["errors"][0]["message"], "Authentication required")
