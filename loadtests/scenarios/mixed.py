"""Mixed workload scenario.

Combines request and order journeys with weights that model a pharmacy's
day: many requests reviewed, fewer turned into orders. This is the
recommended scenario for load baseline testing.
"""

from locust import HttpUser, between

from loadtests.scenarios.orders import OrderCancellationJourney, OrderDeliveryJourney
from loadtests.scenarios.medication_requests import (
    RequestCancellationJourney,
    RequestReviewJourney,
    StaffQueueReader,
)


class MixedWorkloadUser(HttpUser):
    """Realistic mixed workload.

    Requests (55%):
    - Review journeys: most common write path
    - Cancellations: occasional
    - Staff queue reads: constant background polling

    Orders (45%):
    - Delivery: happy path through payment and tracking
    - Cancellation: refunds, stock restoration and request reopening

    Concurrent order creation for the same pharmacy contends on order
    numbering and stock reservation.
    """

    wait_time = between(0.5, 3.0)
    tasks = {
        RequestReviewJourney: 5,
        RequestCancellationJourney: 2,
        StaffQueueReader: 4,
        OrderDeliveryJourney: 6,
        OrderCancellationJourney: 3,
    }
