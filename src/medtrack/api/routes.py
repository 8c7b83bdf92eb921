"""FastAPI routes for the medication request and order lifecycle."""

import os
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query

from medtrack import lifecycle
from medtrack.api.caller import Caller, get_caller
from medtrack.api.schemas import (
    AddInventoryItemRequest,
    AssignDeliveryRequest,
    CancelOrderRequest,
    ChannelConfigResponse,
    ConfigureChannelRequest,
    ConfigureGatewayRequest,
    CreateOrderRequest,
    CreateRequestRequest,
    GatewayConfigResponse,
    OrderStatusRequest,
    ProcessPaymentRequest,
    RegisterPatientRequest,
    RequestStatusRequest,
    UpdateOrderRequest,
    UpdateRequestRequest,
)
from medtrack.errors import Forbidden
from medtrack.gateway import get_gateway
from medtrack.gateway.fake_adapter import FakeGateway
from medtrack.notification.channel import get_channel
from medtrack.notification.kinds import NotificationChannel
from medtrack.order.order import Order
from medtrack.shared.pagination import PageRequest
from medtrack.shared.roles import Role

STAFF = (Role.PHARMACY_STAFF, Role.SYSTEM_ADMIN)


def page_params(
    page: int = Query(1),
    limit: int = Query(10),
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc"),
) -> PageRequest:
    return PageRequest(page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)


def _require_order_access(caller: Caller, order: Order) -> None:
    """Owners, staff and the assigned delivery partner may see an order."""
    if caller.is_staff or order.is_owned_by(caller.user_id):
        return
    if caller.role == Role.DELIVERY_PARTNER.value and str(order.delivery_partner_id) == caller.user_id:
        return
    raise Forbidden("You do not have access to this order")


def _require_non_production(what: str) -> None:
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail=f"{what} configuration not available in production")


# ---------------------------------------------------------------------------
# Patient Router
# ---------------------------------------------------------------------------
patient_router = APIRouter(prefix="/patients", tags=["patients"])


@patient_router.post("", status_code=201)
async def register_patient(body: RegisterPatientRequest, caller: Caller = Depends(get_caller)) -> dict:
    """Record the calling patient's contact details for notifications."""
    caller.require(Role.PATIENT)
    patient = lifecycle.register_patient(
        name=body.name,
        email=body.email,
        phone=body.phone,
        patient_id=caller.user_id,
    )
    return patient.to_dict()


# ---------------------------------------------------------------------------
# Inventory Router
# ---------------------------------------------------------------------------
inventory_router = APIRouter(prefix="/inventory", tags=["inventory"])


@inventory_router.post("", status_code=201)
async def add_inventory_item(body: AddInventoryItemRequest, caller: Caller = Depends(get_caller)) -> dict:
    """Add a medication to a pharmacy's stock."""
    caller.require(*STAFF)
    item = lifecycle.add_inventory_item(**body.model_dump())
    return item.to_dict()


@inventory_router.get("")
async def list_inventory(
    pharmacy_id: str | None = None,
    category: str | None = None,
    requires_prescription: bool | None = None,
    search: str | None = None,
    page_request: PageRequest = Depends(page_params),
    caller: Caller = Depends(get_caller),
) -> dict:
    """Browse stock across pharmacies. Open to every authenticated caller."""
    return lifecycle.get_inventory(
        page_request,
        pharmacy_id=pharmacy_id,
        category=category,
        requires_prescription=requires_prescription,
        search=search,
    ).to_dict()


@inventory_router.get("/low-stock")
async def list_low_stock(pharmacy_id: str | None = None, caller: Caller = Depends(get_caller)) -> dict:
    caller.require(*STAFF)
    items = lifecycle.get_low_stock(pharmacy_id)
    return {"items": [item.to_dict() for item in items], "total": len(items)}


@inventory_router.get("/{item_id}")
async def get_inventory_item(item_id: str, caller: Caller = Depends(get_caller)) -> dict:
    return lifecycle.get_inventory_item(item_id).to_dict()


# ---------------------------------------------------------------------------
# Request Router
# ---------------------------------------------------------------------------
request_router = APIRouter(prefix="/requests", tags=["requests"])


@request_router.post("", status_code=201)
async def create_request(body: CreateRequestRequest, caller: Caller = Depends(get_caller)) -> dict:
    """Submit a medication request on behalf of the calling patient."""
    caller.require(Role.PATIENT)
    request = lifecycle.create_request(patient_id=caller.user_id, **body.model_dump())
    return request.to_dict()


@request_router.get("")
async def list_requests(
    status: str | None = None,
    urgency_level: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    page_request: PageRequest = Depends(page_params),
    caller: Caller = Depends(get_caller),
) -> dict:
    caller.require(*STAFF)
    return lifecycle.get_requests(
        page_request,
        status=status,
        urgency_level=urgency_level,
        date_from=date_from,
        date_to=date_to,
    ).to_dict()


@request_router.get("/urgent")
async def list_urgent_requests(
    page_request: PageRequest = Depends(page_params),
    caller: Caller = Depends(get_caller),
) -> dict:
    caller.require(*STAFF)
    return lifecycle.get_urgent_requests(page_request).to_dict()


@request_router.get("/user/{patient_id}")
async def list_requests_by_user(
    patient_id: str,
    status: str | None = None,
    page_request: PageRequest = Depends(page_params),
    caller: Caller = Depends(get_caller),
) -> dict:
    caller.require_self_or_staff(patient_id)
    return lifecycle.get_requests_by_user(patient_id, page_request, status=status).to_dict()


@request_router.get("/pharmacy/{pharmacy_id}")
async def list_requests_by_pharmacy(
    pharmacy_id: str,
    status: str | None = None,
    page_request: PageRequest = Depends(page_params),
    caller: Caller = Depends(get_caller),
) -> dict:
    caller.require(*STAFF)
    return lifecycle.get_requests_by_pharmacy(pharmacy_id, page_request, status=status).to_dict()


@request_router.get("/{request_id}")
async def get_request(request_id: str, caller: Caller = Depends(get_caller)) -> dict:
    request = lifecycle.get_request(request_id)
    caller.require_self_or_staff(request.patient_id)
    return request.to_dict()


@request_router.patch("/{request_id}")
async def update_request(
    request_id: str, body: UpdateRequestRequest, caller: Caller = Depends(get_caller)
) -> dict:
    """Edit a pending request. Only the owning patient may do this."""
    request = lifecycle.update_request_fields(request_id, caller.user_id, **body.model_dump(exclude_none=True))
    return request.to_dict()


@request_router.patch("/{request_id}/status")
async def transition_request_status(
    request_id: str, body: RequestStatusRequest, caller: Caller = Depends(get_caller)
) -> dict:
    """Move a request along its lifecycle. Staff are scoped to their pharmacy."""
    caller.require(*STAFF)
    request = lifecycle.transition_request_status(
        request_id,
        body.status,
        pharmacy_id=caller.pharmacy_id,
        notes=body.notes,
        response_date=body.response_date,
        estimated_availability=body.estimated_availability,
    )
    return request.to_dict()


@request_router.post("/{request_id}/cancel")
async def cancel_request(request_id: str, caller: Caller = Depends(get_caller)) -> dict:
    request = lifecycle.cancel_request(request_id, caller.user_id, caller.role)
    return request.to_dict()


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201)
async def create_order(body: CreateOrderRequest, caller: Caller = Depends(get_caller)) -> dict:
    """Turn an available request into a confirmed order, reserving stock."""
    caller.require(Role.PATIENT)
    order = lifecycle.create_order_from_request(
        body.request_id,
        caller.user_id,
        items=[item.model_dump() for item in body.items],
        delivery_address=body.delivery_address.model_dump(),
        delivery_fee=body.delivery_fee,
        payment_method=body.payment_method,
        estimated_delivery=body.estimated_delivery,
    )
    return order.to_dict()


@order_router.get("")
async def list_orders(
    status: str | None = None,
    payment_status: str | None = None,
    page_request: PageRequest = Depends(page_params),
    caller: Caller = Depends(get_caller),
) -> dict:
    caller.require(*STAFF)
    return lifecycle.get_orders(page_request, status=status, payment_status=payment_status).to_dict()


@order_router.get("/user/{patient_id}")
async def list_orders_by_user(
    patient_id: str,
    status: str | None = None,
    payment_status: str | None = None,
    page_request: PageRequest = Depends(page_params),
    caller: Caller = Depends(get_caller),
) -> dict:
    caller.require_self_or_staff(patient_id)
    return lifecycle.get_orders_by_user(
        patient_id, page_request, status=status, payment_status=payment_status
    ).to_dict()


@order_router.get("/pharmacy/{pharmacy_id}")
async def list_orders_by_pharmacy(
    pharmacy_id: str,
    status: str | None = None,
    payment_status: str | None = None,
    page_request: PageRequest = Depends(page_params),
    caller: Caller = Depends(get_caller),
) -> dict:
    caller.require(*STAFF)
    return lifecycle.get_orders_by_pharmacy(
        pharmacy_id, page_request, status=status, payment_status=payment_status
    ).to_dict()


@order_router.get("/delivery-partner/{partner_id}")
async def list_orders_by_delivery_partner(
    partner_id: str,
    status: str | None = None,
    payment_status: str | None = None,
    page_request: PageRequest = Depends(page_params),
    caller: Caller = Depends(get_caller),
) -> dict:
    caller.require_self_or_staff(partner_id)
    return lifecycle.get_orders_by_delivery_partner(
        partner_id, page_request, status=status, payment_status=payment_status
    ).to_dict()


@order_router.get("/{order_id}")
async def get_order(order_id: str, caller: Caller = Depends(get_caller)) -> dict:
    order = lifecycle.get_order(order_id)
    _require_order_access(caller, order)
    return order.to_dict()


@order_router.patch("/{order_id}")
async def update_order(order_id: str, body: UpdateOrderRequest, caller: Caller = Depends(get_caller)) -> dict:
    caller.require(*STAFF)
    order = lifecycle.update_order_details(
        order_id,
        delivery_address=body.delivery_address.model_dump() if body.delivery_address else None,
        delivery_fee=body.delivery_fee,
        estimated_delivery=body.estimated_delivery,
    )
    return order.to_dict()


@order_router.patch("/{order_id}/status")
async def transition_order_status(
    order_id: str, body: OrderStatusRequest, caller: Caller = Depends(get_caller)
) -> dict:
    """Advance an order toward delivery. Delivery partners may only move orders assigned to them."""
    caller.require(*STAFF, Role.DELIVERY_PARTNER)
    if caller.role == Role.DELIVERY_PARTNER.value:
        _require_order_access(caller, lifecycle.get_order(order_id))

    order = lifecycle.transition_order_status(
        order_id,
        body.status,
        location=body.location,
        notes=body.notes,
        changed_by=caller.user_id,
        caller_role=caller.role,
    )
    return order.to_dict()


@order_router.post("/{order_id}/payment")
async def process_payment(order_id: str, body: ProcessPaymentRequest, caller: Caller = Depends(get_caller)) -> dict:
    """Charge the order total through the payment gateway."""
    caller.require_self_or_staff(lifecycle.get_order(order_id).patient_id)
    order = lifecycle.process_payment(order_id, body.payment_method)
    return order.to_dict()


@order_router.post("/{order_id}/cancel")
async def cancel_order(order_id: str, body: CancelOrderRequest, caller: Caller = Depends(get_caller)) -> dict:
    """Cancel an order, refunding a captured payment and restoring stock."""
    order = lifecycle.cancel_order(order_id, caller.user_id, caller.role, reason=body.reason)
    return order.to_dict()


@order_router.post("/{order_id}/assign-delivery")
async def assign_delivery_partner(
    order_id: str, body: AssignDeliveryRequest, caller: Caller = Depends(get_caller)
) -> dict:
    caller.require(*STAFF)
    order = lifecycle.assign_delivery_partner(order_id, body.delivery_partner_id)
    return order.to_dict()


@order_router.get("/{order_id}/tracking")
async def get_delivery_tracking(order_id: str, caller: Caller = Depends(get_caller)) -> dict:
    _require_order_access(caller, lifecycle.get_order(order_id))
    return lifecycle.get_delivery_tracking(order_id)


@order_router.post("/{order_id}/invoice")
async def generate_invoice(order_id: str, caller: Caller = Depends(get_caller)) -> dict:
    caller.require_self_or_staff(lifecycle.get_order(order_id).patient_id)
    order = lifecycle.generate_invoice(order_id)
    return {"order_id": str(order.id), "invoice_url": order.invoice_url}


# ---------------------------------------------------------------------------
# Fakes Router (non-production)
# ---------------------------------------------------------------------------
fakes_router = APIRouter(tags=["fakes"])


@fakes_router.post("/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only)."""
    _require_non_production("Gateway")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    try:
        gateway.configure(
            should_succeed=body.should_succeed,
            failure_reason=body.failure_reason,
            operations=body.operations,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        failure_reason=gateway.failure_reason,
        operations=sorted(gateway.failing_operations),
    )


@fakes_router.post("/channels/configure", response_model=ChannelConfigResponse)
async def configure_channel(body: ConfigureChannelRequest) -> ChannelConfigResponse:
    """Configure a fake notification channel (non-production only)."""
    _require_non_production("Channel")

    if body.channel not in {channel.value for channel in NotificationChannel}:
        raise HTTPException(status_code=422, detail=f"Unknown channel type: {body.channel}")

    adapter = get_channel(body.channel)
    if not hasattr(adapter, "configure"):
        raise HTTPException(status_code=400, detail="Channel configuration only available for fake adapters")

    adapter.configure(should_succeed=body.should_succeed, failure_reason=body.failure_reason)
    return ChannelConfigResponse(
        channel=body.channel,
        adapter=type(adapter).__name__,
        should_succeed=adapter.should_succeed,
        failure_reason=adapter.failure_reason,
    )
