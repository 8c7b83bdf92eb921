"""Locust entry point for the medtrack HTTP API.

User classes come from ``loadtests.scenarios``; pick one on the command line
to run it alone:

    locust -f loadtests/locustfile.py RequestUser
    locust -f loadtests/locustfile.py MixedWorkloadUser --headless \
           -u 40 -r 4 -t 5m --csv=results/medtrack
"""

import logging
from collections import Counter

import requests
from locust import events

from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.medication_requests import RequestUser  # noqa: F401
from loadtests.scenarios.mixed import MixedWorkloadUser  # noqa: F401
from loadtests.scenarios.orders import OrderUser  # noqa: F401

logger = logging.getLogger("medtrack.loadtest")

# Failures by "<status> <error class>", reported when the run stops
failure_tally: Counter = Counter()


def _error_class(detail: str) -> str:
    head, sep, _ = detail.partition(":")
    return head if sep and " " not in head else "other"


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kwargs):
    if exception:
        failure_tally[f"--- {type(exception).__name__}"] += 1
        logger.error("%s %s raised %s", request_type, name, exception)
        return

    if response is not None and response.status_code >= 400:
        detail = extract_error_detail(response)
        failure_tally[f"{response.status_code} {_error_class(detail)}"] += 1
        logger.warning("%s %s -> %s %s", request_type, name, response.status_code, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    failure_tally.clear()
    if not environment.host:
        logger.info("No target host set, skipping health probe")
        return

    try:
        resp = requests.get(f"{environment.host}/health", timeout=5)
    except requests.RequestException as exc:
        logger.error("Health probe against %s failed: %s", environment.host, exc)
        return
    logger.info("Health probe against %s: %s %s", environment.host, resp.status_code, resp.text)


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    total = environment.stats.total
    logger.info("Run finished: %d requests, %d failures", total.num_requests, total.num_failures)
    for key, count in failure_tally.most_common():
        logger.info("  %6d  %s", count, key)
