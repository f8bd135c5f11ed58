"""Storefront Load Testing — Locust entry point.

Discovers all user classes from the scenarios package. Seed the catalogue
first so product ids 1..N exist:

    python src/manage.py seed-products --count 20 --stock 500

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py

    # Realistic shopper traffic only:
    locust -f loadtests/locustfile.py ShopperUser

    # Flash sale on one product:
    locust -f loadtests/locustfile.py RushUser

    # Headless (CI mode):
    locust -f loadtests/locustfile.py ShopperUser --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest
"""

import logging
import time

import requests
from locust import events

# Import all user classes so Locust discovers them
from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.checkout import ShopperUser  # noqa: F401
from loadtests.scenarios.stress import RushUser, SpikeUser  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request.

    Fires globally for all scenarios, so no per-task wiring is needed.
    Extracts the API error body so you see "Insufficient stock for: 1
    (requested 1, available 0)" instead of just "400".
    """
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    """Log a marker when load test begins and check the target is up."""
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")
    try:
        resp = requests.get(f"{environment.host}/health", timeout=5)
        print(f"[LOADTEST] Health: {resp.status_code} {resp.text}")
    except Exception as e:
        print(f"[LOADTEST] Health check failed: {e}")
    print()


@events.test_stop.add_listener
def on_test_stop(**_kwargs):
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}\n")
