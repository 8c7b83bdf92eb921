"""Medication request load test scenarios.

Stateful SequentialTaskSet journeys covering request submission, patient
edits, staff review and cancellation. Steps execute in order, and each
depends on the previous step succeeding.
"""

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    patient_data,
    patient_headers,
    request_data,
    staff_headers,
    unique_id,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import RequestState

PHARMACY_ID = "pharm-lt-001"
STAFF_ID = "staff-lt-001"


class RequestJourneyBase(SequentialTaskSet):
    """Registers a fresh patient and submits one request."""

    def on_start(self):
        self.state = RequestState(patient_id=unique_id("patient"))

    @property
    def as_patient(self) -> dict:
        return patient_headers(self.state.patient_id)

    @property
    def as_staff(self) -> dict:
        return staff_headers(STAFF_ID, PHARMACY_ID)

    @task
    def register_patient(self):
        with self.client.post(
            "/patients",
            json=patient_data(),
            headers=self.as_patient,
            catch_response=True,
            name="POST /patients",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Registration failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def submit_request(self):
        with self.client.post(
            "/requests",
            json=request_data(PHARMACY_ID, "Ibuprofen 200mg"),
            headers=self.as_patient,
            catch_response=True,
            name="POST /requests",
        ) as resp:
            if resp.status_code == 201:
                self.state.request_id = resp.json()["id"]
            else:
                resp.failure(f"Request submission failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    def _move_to(self, status: str):
        with self.client.patch(
            f"/requests/{self.state.request_id}/status",
            json={"status": status, "notes": f"Load test: {status}"},
            headers=self.as_staff,
            catch_response=True,
            name="PATCH /requests/{id}/status",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = status
            else:
                resp.failure(f"Move to {status} failed: {resp.status_code} {extract_error_detail(resp)}")


class RequestReviewJourney(RequestJourneyBase):
    """Register -> Submit -> Edit -> Processing -> Unavailable.

    Exercises the staff review path that ends without an order.
    """

    @task
    def edit_request(self):
        with self.client.patch(
            f"/requests/{self.state.request_id}",
            json={"quantity": 2, "notes": "Updated by load test"},
            headers=self.as_patient,
            catch_response=True,
            name="PATCH /requests/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Edit failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def start_processing(self):
        self._move_to("processing")

    @task
    def mark_unavailable(self):
        self._move_to("unavailable")

    @task
    def done(self):
        self.interrupt()


class RequestCancellationJourney(RequestJourneyBase):
    """Register -> Submit -> Processing -> Patient cancels."""

    @task
    def start_processing(self):
        self._move_to("processing")

    @task
    def cancel(self):
        with self.client.post(
            f"/requests/{self.state.request_id}/cancel",
            headers=self.as_patient,
            catch_response=True,
            name="POST /requests/{id}/cancel",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = "cancelled"
            else:
                resp.failure(f"Cancel failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class StaffQueueReader(SequentialTaskSet):
    """Staff polling their queues: urgent requests, then the pharmacy list."""

    @task
    def urgent_queue(self):
        self.client.get(
            "/requests/urgent",
            params={"limit": 20},
            headers=staff_headers(STAFF_ID, PHARMACY_ID),
            name="GET /requests/urgent",
        )

    @task
    def pharmacy_queue(self):
        self.client.get(
            f"/requests/pharmacy/{PHARMACY_ID}",
            params={"status": "pending", "sort_by": "request_date", "sort_order": "asc"},
            headers=staff_headers(STAFF_ID, PHARMACY_ID),
            name="GET /requests/pharmacy/{id}",
        )

    @task
    def done(self):
        self.interrupt()


class RequestUser(HttpUser):
    """Locust user simulating request traffic.

    Weighted task distribution:
    - 50% Review journey
    - 20% Cancellation
    - 30% Staff queue reads
    """

    wait_time = between(0.5, 2.0)
    tasks = {
        RequestReviewJourney: 5,
        RequestCancellationJourney: 2,
        StaffQueueReader: 3,
    }
