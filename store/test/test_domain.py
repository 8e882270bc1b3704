"""
Unit tests for domain models.
"""
from decimal import Decimal
from uuid import uuid4

from django.test import TestCase

from store.domain.cart import CartLine, cart_totals, clamp_quantity, merged_quantity, validate_line_quantity
from store.domain.claim_code import CLAIM_CODE_ALPHABET, generate_claim_code, normalize_claim_code
from store.domain.discount import apply_discount, compute_discount, round_money
from store.domain.errors import ErrorKind, Forbidden, InvalidState
from store.domain.events import BookPurchased, OrderCancelled, serialize_event
from store.domain.order import AUTO_ACCEPT, Order, OrderItem, OrderStatus
from store.domain.results import GENERIC_ERROR_MESSAGE, Result
from store.domain.roles import Capability, Role, is_permitted


class DiscountTest(TestCase):
    """Tests for the stacked discount table."""

    def test_no_discount_below_thresholds(self):
        """Test that small orders from new members get no discount."""
        discount = compute_discount(4, 0)
        self.assertEqual(discount.percentage, Decimal("0"))
        self.assertEqual(discount.description, "")
        self.assertFalse(discount.applies)

    def test_volume_discount(self):
        """Test the volume discount for five or more books."""
        discount = compute_discount(5, 0)
        self.assertEqual(discount.percentage, Decimal("0.05"))
        self.assertEqual(discount.description, "5% volume discount")

    def test_loyalty_discount(self):
        """Test the loyalty discount after ten prior orders."""
        discount = compute_discount(4, 10)
        self.assertEqual(discount.percentage, Decimal("0.10"))
        self.assertEqual(discount.description, "10% loyalty discount")

    def test_discounts_stack_additively(self):
        """Test that volume and loyalty discounts add up."""
        discount = compute_discount(5, 10)
        self.assertEqual(discount.percentage, Decimal("0.15"))
        self.assertEqual(discount.description, "5% volume discount, 10% loyalty discount")

    def test_discount_never_exceeds_fifteen_percent(self):
        """Test that the combined discount is capped at fifteen percent."""
        self.assertEqual(compute_discount(500, 1000).percentage, Decimal("0.15"))

    def test_apply_discount(self):
        """Test applying a discount to a subtotal."""
        self.assertEqual(apply_discount(Decimal("50.00"), Decimal("0.15")), Decimal("42.50"))
        self.assertEqual(apply_discount(Decimal("19.99"), Decimal("0.00")), Decimal("19.99"))

    def test_rounding_is_half_up(self):
        """Test that money rounds half up to the cent."""
        # 0.95 * 0.10 = 0.095
        self.assertEqual(apply_discount(Decimal("0.10"), Decimal("0.05")), Decimal("0.10"))
        self.assertEqual(round_money(Decimal("2.345")), Decimal("2.35"))
        self.assertEqual(round_money(Decimal("2.344")), Decimal("2.34"))


class ClaimCodeTest(TestCase):
    """Tests for claim code generation."""

    def test_code_shape(self):
        """Test claim code length and alphabet."""
        code = generate_claim_code()
        self.assertEqual(len(code), 8)
        self.assertTrue(all(char in CLAIM_CODE_ALPHABET for char in code))

    def test_codes_are_unique(self):
        """Test that generated claim codes do not repeat."""
        codes = {generate_claim_code() for _ in range(10000)}
        self.assertEqual(len(codes), 10000)

    def test_short_codes_rejected(self):
        """Test that claim codes cannot be generated too short."""
        with self.assertRaises(ValueError):
            generate_claim_code(6)

    def test_normalize(self):
        """Test claim code normalization."""
        self.assertEqual(normalize_claim_code("  abcd2345 "), "ABCD2345")
        self.assertEqual(normalize_claim_code(None), "")


class CartRulesTest(TestCase):
    """Tests for cart quantity rules."""

    def test_clamp(self):
        """Test clamping a quantity into range."""
        self.assertEqual(clamp_quantity(0), 1)
        self.assertEqual(clamp_quantity(150), 99)
        self.assertEqual(clamp_quantity(7), 7)

    def test_merge_caps_at_maximum(self):
        """Test that merging lines caps at the maximum."""
        self.assertEqual(merged_quantity(98, 5), 99)
        self.assertEqual(merged_quantity(2, 3), 5)

    def test_merge_rejects_non_positive(self):
        """Test that merging a non-positive quantity fails."""
        with self.assertRaises(InvalidState):
            merged_quantity(2, 0)

    def test_validate_line_quantity(self):
        """Test line quantity validation."""
        self.assertEqual(validate_line_quantity(99), 99)
        for quantity in (0, 100, -3):
            with self.assertRaises(InvalidState):
                validate_line_quantity(quantity)

    def test_cart_totals(self):
        """Test cart item and price totals."""
        lines = [
            CartLine(uuid4(), uuid4(), "A", "X", Decimal("10.00"), 2),
            CartLine(uuid4(), uuid4(), "B", "Y", Decimal("4.50"), 3),
        ]
        self.assertEqual(cart_totals(lines), (5, Decimal("33.50")))
        self.assertEqual(cart_totals([]), (0, Decimal("0.00")))


class OrderItemTest(TestCase):
    """Tests for OrderItem value object."""

    def test_line_total(self):
        """Test the price of one cart line."""
        item = OrderItem(book_id=uuid4(), quantity=2, unit_price=Decimal("12.50"))
        self.assertEqual(item.line_total, Decimal("25.00"))

    def test_non_positive_quantity_fails(self):
        """Test that a non-positive quantity raises error."""
        with self.assertRaises(ValueError):
            OrderItem(book_id=uuid4(), quantity=0, unit_price=Decimal("1.00"))

    def test_negative_price_fails(self):
        """Test that negative price raises error."""
        with self.assertRaises(ValueError):
            OrderItem(book_id=uuid4(), quantity=1, unit_price=Decimal("-1.00"))


class OrderTest(TestCase):
    """Tests for the order state machine."""

    def setUp(self):
        self.member_id = uuid4()
        self.owner_user_id = uuid4()
        self.order = self.make_order()

    def make_order(self, **state):
        return Order(
            member_id=self.member_id,
            owner_user_id=self.owner_user_id,
            items=[OrderItem(book_id=uuid4(), quantity=3, unit_price=Decimal("5.00"))],
            claim_code="ABCDEFGH",
            **state,
        )

    def test_new_order_is_pending(self):
        """Test that a new order is pending and counts its books."""
        self.assertEqual(self.order.status, OrderStatus.PENDING)
        self.assertEqual(self.order.total_books, 3)

    def test_terminal_statuses(self):
        """Test status derivation from the terminal flags."""
        self.assertEqual(self.make_order(is_processed=True).status, OrderStatus.PROCESSED)
        self.assertEqual(self.make_order(is_cancelled=True).status, OrderStatus.CANCELLED)

    def test_cannot_be_both_terminal(self):
        """Test that an order cannot be both processed and cancelled."""
        with self.assertRaises(ValueError):
            Order(is_processed=True, is_cancelled=True)

    def test_owner_may_cancel(self):
        """Test that the owning member passes the cancel check."""
        self.order.ensure_can_cancel(self.member_id)

    def test_other_member_cannot_cancel(self):
        """Test that only the owner may cancel."""
        with self.assertRaises(Forbidden):
            self.order.ensure_can_cancel(uuid4())
        with self.assertRaises(Forbidden):
            self.order.ensure_can_cancel(None)

    def test_processed_order_cannot_be_cancelled(self):
        """Test that a picked-up order cannot be cancelled."""
        with self.assertRaises(InvalidState) as context:
            self.make_order(is_processed=True).ensure_can_cancel(self.member_id)
        self.assertEqual(context.exception.message, "Cannot cancel a processed order")

    def test_cancelled_order_cannot_be_cancelled_again(self):
        """Test that cancelling twice is rejected."""
        with self.assertRaises(InvalidState) as context:
            self.make_order(is_cancelled=True).ensure_can_cancel(self.member_id)
        self.assertEqual(context.exception.message, "Order is already cancelled")

    def test_process_requires_matching_membership_id(self):
        """Test that pickup needs the owner's membership id, compared case-insensitively."""
        with self.assertRaises(InvalidState) as context:
            self.order.ensure_can_process(str(uuid4()))
        self.assertEqual(
            context.exception.message,
            "The provided membership ID does not match the order's owner",
        )
        self.order.ensure_can_process(str(self.owner_user_id).upper())

    def test_auto_accept_skips_owner_check(self):
        """Test that auto-accept bypasses the membership id comparison."""
        self.order.ensure_can_process(AUTO_ACCEPT)

    def test_processing_is_terminal(self):
        """Test that a processed order cannot be processed again."""
        with self.assertRaises(InvalidState) as context:
            self.make_order(is_processed=True).ensure_can_process(AUTO_ACCEPT)
        self.assertEqual(context.exception.message, "Order is already processed")

    def test_cancelled_order_cannot_be_processed(self):
        """Test that a cancelled order cannot be picked up."""
        with self.assertRaises(InvalidState) as context:
            self.make_order(is_cancelled=True).ensure_can_process(AUTO_ACCEPT)
        self.assertEqual(context.exception.message, "Cannot process a cancelled order")


class RolesTest(TestCase):
    """Tests for the capability table."""

    def test_members(self):
        """Test member capabilities."""
        self.assertTrue(is_permitted(Role.MEMBER, Capability.PLACE_ORDER))
        self.assertTrue(is_permitted(Role.MEMBER, Capability.USE_CART))
        self.assertTrue(is_permitted(Role.MEMBER, Capability.USE_BOOKMARKS))
        self.assertFalse(is_permitted(Role.MEMBER, Capability.PROCESS_ORDER))
        self.assertFalse(is_permitted(Role.MEMBER, Capability.VIEW_ANY_ORDER))

    def test_staff(self):
        """Test staff capabilities."""
        self.assertTrue(is_permitted(Role.STAFF, Capability.PROCESS_ORDER))
        self.assertTrue(is_permitted(Role.STAFF, Capability.VIEW_ANY_ORDER))
        self.assertFalse(is_permitted(Role.STAFF, Capability.PLACE_ORDER))
        self.assertFalse(is_permitted(Role.STAFF, Capability.MANAGE_CATALOG))

    def test_admins(self):
        """Test admin capabilities."""
        self.assertFalse(is_permitted(Role.ADMIN, Capability.USE_CART))
        self.assertFalse(is_permitted(Role.ADMIN, Capability.USE_BOOKMARKS))
        self.assertFalse(is_permitted(Role.ADMIN, Capability.PLACE_ORDER))
        self.assertTrue(is_permitted(Role.ADMIN, Capability.MANAGE_CATALOG))
        self.assertTrue(is_permitted(Role.ADMIN, Capability.REVIEW_WITHOUT_PURCHASE))


class ResultAndEventTest(TestCase):

    def test_failure_from_error(self):
        """Test building a failed result from a business rule error."""
        result = Result.from_error(Forbidden("nope"))
        self.assertFalse(result.success)
        self.assertEqual(result.error_kind, ErrorKind.FORBIDDEN)
        self.assertEqual(result.message, "nope")

    def test_unexpected_hides_details(self):
        """Test that unexpected failures carry only the generic message."""
        result = Result.unexpected()
        self.assertEqual(result.error_kind, ErrorKind.UNEXPECTED)
        self.assertEqual(result.message, GENERIC_ERROR_MESSAGE)

    def test_book_purchased_message(self):
        """Test the activity feed message for a purchase."""
        event = BookPurchased(
            event_id=uuid4(),
            aggregate_id=uuid4(),
            event_type="BookPurchased",
            order_id=uuid4(),
            member_name="Ada",
            book_title="Dune",
            quantity=1,
        )
        self.assertEqual(event.message, "Ada just purchased Dune!")

    def test_serialize_event(self):
        """Test event serialization."""
        book_id = str(uuid4())
        event = OrderCancelled(
            event_id=uuid4(),
            aggregate_id=uuid4(),
            event_type="OrderCancelled",
            restored_books={book_id: 2},
        )
        data = serialize_event(event)
        self.assertEqual(data["event_type"], "OrderCancelled")
        self.assertEqual(data["version"], "1.0")
        self.assertEqual(data["restored_books"], {book_id: 2})
