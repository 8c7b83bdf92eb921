"""Pydantic request/response schemas for the lifecycle API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

# --- Directory and stock ---


class RegisterPatientRequest(BaseModel):
    name: str = Field(..., max_length=100)
    email: str = Field(..., max_length=254)
    phone: str | None = Field(None, max_length=20)


class AddInventoryItemRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "pharmacy_id": "pharm-001",
                    "medication_name": "Amoxicillin 500mg",
                    "generic_name": "Amoxicillin",
                    "category": "prescription",
                    "form": "capsule",
                    "quantity": 120,
                    "unit_price": 5.99,
                    "requires_prescription": True,
                }
            ]
        }
    }

    pharmacy_id: str
    medication_name: str = Field(..., max_length=200)
    generic_name: str | None = Field(None, max_length=200)
    category: str = "otc"
    form: str | None = None
    quantity: int = Field(0, ge=0)
    unit_price: float = Field(..., ge=0)
    requires_prescription: bool = False
    low_stock_threshold: int | None = Field(None, ge=0)


# --- Requests ---


class CreateRequestRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "pharmacy_id": "pharm-001",
                    "medication_name": "Amoxicillin 500mg",
                    "quantity": 2,
                    "urgency_level": "urgent",
                    "prescription_required": True,
                    "notes": "Needed before the weekend",
                }
            ]
        }
    }

    pharmacy_id: str
    medication_name: str = Field(..., max_length=200)
    quantity: int = Field(..., ge=1)
    urgency_level: str = "normal"
    prescription_required: bool = False
    prescription_image: str | None = Field(None, max_length=500)
    notes: str | None = None
    estimated_availability: datetime | None = None


class UpdateRequestRequest(BaseModel):
    quantity: int | None = Field(None, ge=1)
    urgency_level: str | None = None
    notes: str | None = None
    prescription_image: str | None = Field(None, max_length=500)


class RequestStatusRequest(BaseModel):
    status: str
    notes: str | None = None
    response_date: datetime | None = None
    estimated_availability: datetime | None = None


# --- Orders ---


class CoordinatesSchema(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class DeliveryAddressSchema(BaseModel):
    street: str = Field(..., max_length=255)
    city: str = Field(..., max_length=100)
    postal_code: str = Field(..., max_length=20)
    phone: str = Field(..., max_length=20)
    coordinates: CoordinatesSchema | None = None


class OrderLineRequest(BaseModel):
    medication_id: str
    quantity: int = Field(..., ge=1)


class CreateOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "request_id": "req-001",
                    "items": [{"medication_id": "inv-001", "quantity": 2}],
                    "delivery_address": {
                        "street": "12 Harbour Road",
                        "city": "Springfield",
                        "postal_code": "12345",
                        "phone": "+1 555 0100",
                    },
                    "delivery_fee": 3.0,
                    "payment_method": "card",
                }
            ]
        }
    }

    request_id: str
    items: list[OrderLineRequest] = Field(..., min_length=1)
    delivery_address: DeliveryAddressSchema
    delivery_fee: float = Field(0.0, ge=0)
    payment_method: str | None = None
    estimated_delivery: datetime | None = None


class UpdateOrderRequest(BaseModel):
    delivery_address: DeliveryAddressSchema | None = None
    delivery_fee: float | None = Field(None, ge=0)
    estimated_delivery: datetime | None = None


class OrderStatusRequest(BaseModel):
    status: str
    location: str | None = Field(None, max_length=200)
    notes: str | None = None


class ProcessPaymentRequest(BaseModel):
    payment_method: str


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


class AssignDeliveryRequest(BaseModel):
    delivery_partner_id: str


# --- Fakes (non-production) ---


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Card declined"
    operations: list[str] | None = None


class GatewayConfigResponse(BaseModel):
    gateway: str
    should_succeed: bool
    failure_reason: str
    operations: list[str]


class ConfigureChannelRequest(BaseModel):
    channel: str
    should_succeed: bool = True
    failure_reason: str = "Delivery failed"


class ChannelConfigResponse(BaseModel):
    channel: str
    adapter: str
    should_succeed: bool
    failure_reason: str
