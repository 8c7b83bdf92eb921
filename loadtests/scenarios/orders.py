"""Order lifecycle load test scenarios.

Each journey stocks an item, takes a request to available, turns it into
an order and then drives the order to delivery or cancellation. This
stresses the coordinator: stock reservation, order numbering and the
payment gateway inside one Unit of Work.
"""

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    inventory_item_data,
    order_data,
    partner_headers,
    patient_data,
    patient_headers,
    request_data,
    staff_headers,
    unique_id,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import OrderState, PharmacyState

PHARMACY_ID = "pharm-lt-002"


class OrderJourneyBase(SequentialTaskSet):
    """Stock -> Register -> Request -> Processing -> Available -> Order."""

    def on_start(self):
        self.pharmacy = PharmacyState(pharmacy_id=PHARMACY_ID, staff_id=unique_id("staff"))
        self.state = OrderState(patient_id=unique_id("patient"))

    @property
    def as_patient(self) -> dict:
        return patient_headers(self.state.patient_id)

    @property
    def as_staff(self) -> dict:
        return staff_headers(self.pharmacy.staff_id, self.pharmacy.pharmacy_id)

    @task
    def stock_item(self):
        payload = inventory_item_data(self.pharmacy.pharmacy_id)
        with self.client.post(
            "/inventory",
            json=payload,
            headers=self.as_staff,
            catch_response=True,
            name="POST /inventory",
        ) as resp:
            if resp.status_code == 201:
                self.pharmacy.item_ids.append(resp.json()["id"])
                self.pharmacy.medication_name = payload["medication_name"]
            else:
                resp.failure(f"Stocking failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def register_and_request(self):
        self.client.post("/patients", json=patient_data(), headers=self.as_patient, name="POST /patients")
        with self.client.post(
            "/requests",
            json=request_data(self.pharmacy.pharmacy_id, self.pharmacy.medication_name),
            headers=self.as_patient,
            catch_response=True,
            name="POST /requests",
        ) as resp:
            if resp.status_code == 201:
                self.state.request_id = resp.json()["id"]
            else:
                resp.failure(f"Request submission failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def make_available(self):
        for status in ("processing", "available"):
            with self.client.patch(
                f"/requests/{self.state.request_id}/status",
                json={"status": status},
                headers=self.as_staff,
                catch_response=True,
                name="PATCH /requests/{id}/status",
            ) as resp:
                if resp.status_code != 200:
                    resp.failure(f"Move to {status} failed: {resp.status_code} {extract_error_detail(resp)}")
                    self.interrupt()

    @task
    def place_order(self):
        with self.client.post(
            "/orders",
            json=order_data(self.state.request_id, self.pharmacy.item_ids[-1], quantity=1),
            headers=self.as_patient,
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                body = resp.json()
                self.state.order_id = body["id"]
                self.state.order_number = body["order_number"]
            else:
                resp.failure(f"Order creation failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def pay(self):
        with self.client.post(
            f"/orders/{self.state.order_id}/payment",
            json={"payment_method": "card"},
            headers=self.as_patient,
            catch_response=True,
            name="POST /orders/{id}/payment",
        ) as resp:
            if resp.status_code == 200:
                self.state.payment_status = "paid"
            else:
                resp.failure(f"Payment failed: {resp.status_code} {extract_error_detail(resp)}")


class OrderDeliveryJourney(OrderJourneyBase):
    """... -> Pay -> Assign partner -> Packed -> Out for delivery -> Delivered -> Invoice."""

    @task
    def assign_partner(self):
        partner_id = unique_id("driver")
        with self.client.post(
            f"/orders/{self.state.order_id}/assign-delivery",
            json={"delivery_partner_id": partner_id},
            headers=self.as_staff,
            catch_response=True,
            name="POST /orders/{id}/assign-delivery",
        ) as resp:
            if resp.status_code == 200:
                self.state.delivery_partner_id = partner_id
            else:
                resp.failure(f"Assignment failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def deliver(self):
        for status in ("packed", "out_for_delivery", "delivered"):
            with self.client.patch(
                f"/orders/{self.state.order_id}/status",
                json={"status": status, "location": "Load test route"},
                headers=partner_headers(self.state.delivery_partner_id),
                catch_response=True,
                name="PATCH /orders/{id}/status",
            ) as resp:
                if resp.status_code == 200:
                    self.state.current_status = status
                else:
                    resp.failure(f"Move to {status} failed: {resp.status_code} {extract_error_detail(resp)}")
                    self.interrupt()

    @task
    def track_and_invoice(self):
        self.client.get(
            f"/orders/{self.state.order_id}/tracking",
            headers=self.as_patient,
            name="GET /orders/{id}/tracking",
        )
        self.client.post(
            f"/orders/{self.state.order_id}/invoice",
            headers=self.as_patient,
            name="POST /orders/{id}/invoice",
        )

    @task
    def done(self):
        self.interrupt()


class OrderCancellationJourney(OrderJourneyBase):
    """... -> Pay -> Patient cancels (refund, stock restored, request reopened)."""

    @task
    def cancel(self):
        with self.client.post(
            f"/orders/{self.state.order_id}/cancel",
            json={"reason": "Load test cancellation"},
            headers=self.as_patient,
            catch_response=True,
            name="POST /orders/{id}/cancel",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = "cancelled"
                self.state.payment_status = resp.json()["payment_status"]
            else:
                resp.failure(f"Cancel failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class OrderUser(HttpUser):
    """Locust user simulating order traffic.

    Weighted task distribution:
    - 70% Delivery (happy path)
    - 30% Cancellation
    """

    wait_time = between(0.5, 2.0)
    tasks = {
        OrderDeliveryJourney: 7,
        OrderCancellationJourney: 3,
    }
