"""
GraphQL schema definition using Ariadne.
"""
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from uuid import UUID

from ariadne import (
    MutationType,
    ObjectType,
    QueryType,
    ScalarType,
    load_schema_from_path,
    make_executable_schema,
)
from graphql import GraphQLError

from store.domain.results import Result
from store.infra.repositories import UserRepository
from store.services import OrderService

SCHEMAS_DIR = Path(__file__).parent / "schemas"
type_defs = "\n".join([
    load_schema_from_path(SCHEMAS_DIR / "common.graphql"),
    load_schema_from_path(SCHEMAS_DIR / "query.graphql"),
    load_schema_from_path(SCHEMAS_DIR / "mutation.graphql"),
])

query = QueryType()
mutation = MutationType()
order_type = ObjectType("Order")


def caller_from(info) -> UUID:
    """Resolve the X-User-ID caller or fail the operation."""
    caller_id = getattr(info.context["request"], "caller_id", None)
    if caller_id is None or UserRepository().get_by_id(caller_id) is None:
        raise GraphQLError("Authentication required", extensions={"errorKind": "UNAUTHENTICATED"})
    return caller_id


def unwrap(result: Result):
    """Return the value of a successful result, raise a GraphQL error otherwise."""
    if not result.success:
        raise GraphQLError(result.message, extensions={"errorKind": result.error_kind.value})
    return result.value


def order_payload(result: Result) -> dict:
    return {
        "success": result.success,
        "message": result.message,
        "error_kind": result.error_kind.value if result.error_kind else None,
        "order": result.value,
    }


@query.field("order")
def resolve_order(_, info, id):
    return unwrap(OrderService().get_order(caller_from(info), id))


@query.field("myOrders")
def resolve_my_orders(_, info):
    return unwrap(OrderService().get_member_orders(caller_from(info)))


@query.field("allOrders")
def resolve_all_orders(_, info, processed=None):
    return unwrap(OrderService().get_all_orders(caller_from(info), processed))


@mutation.field("createOrder")
def resolve_create_order(_, info, note=None):
    return order_payload(OrderService().create_order_from_cart(caller_from(info), note))


@mutation.field("cancelOrder")
def resolve_cancel_order(_, info, order_id):
    return order_payload(OrderService().cancel_order(caller_from(info), order_id))


@mutation.field("processOrder")
def resolve_process_order(_, info, claim_code, membership_id):
    return order_payload(OrderService().process_order(caller_from(info), claim_code, membership_id))


@order_type.field("status")
def resolve_order_status(order, info):
    return order.status.value


decimal_scalar = ScalarType("Decimal")
uuid_scalar = ScalarType("UUID")
datetime_scalar = ScalarType("DateTime")


@decimal_scalar.serializer
def serialize_decimal(value):
    """Serialize Decimal to string."""
    return str(value)


@decimal_scalar.value_parser
def parse_decimal_value(value):
    return Decimal(str(value))


@uuid_scalar.serializer
def serialize_uuid(value):
    return str(value)


@uuid_scalar.value_parser
def parse_uuid_value(value):
    """Parse UUID from string."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise GraphQLError(f"Invalid UUID: {value}")


@uuid_scalar.literal_parser
def parse_uuid_literal(ast, variables=None):
    return parse_uuid_value(getattr(ast, "value", None))


@datetime_scalar.serializer
def serialize_datetime(value):
    """Serialize DateTime to ISO format string."""
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


schema = make_executable_schema(
    type_defs,
    query,
    mutation,
    order_type,
    decimal_scalar,
    uuid_scalar,
    datetime_scalar,
    convert_names_case=True,
)
