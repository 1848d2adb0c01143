"""
Storefront/back office client for the marketplace API.

Wraps the JSON envelope, holds the admin token per client instance and
polls payment status with bounded backoff.
"""
import logging
import re
import threading
import time
from typing import Callable, Dict, List, Optional, Sequence

import requests

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
LOCAL_PHONE_PATTERN = re.compile(r"^\d{9}$")

TERMINAL_STATUSES = {"completed", "failed"}


class ApiError(Exception):
    """Unsuccessful envelope (or non-JSON error) returned by the API"""

    def __init__(self, status_code: int, message: str, data: Optional[dict] = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.data = data or {}

    @property
    def transaction_id(self) -> Optional[str]:
        return self.data.get("transaction_id")


class PollTimeout(Exception):
    pass


class PollCancelled(Exception):
    pass


def validate_checkout_form(
    name: str,
    email: str,
    phone: str,
    template_ids: Sequence[int],
) -> List[str]:
    """Client-side checks before submitting a checkout. Empty list means valid."""
    errors = []
    if not name or not email or not phone:
        errors.append("Please fill in all required fields")
    if email and not EMAIL_PATTERN.match(email):
        errors.append("Please enter a valid email address")
    if phone and not LOCAL_PHONE_PATTERN.match(phone):
        errors.append("Please enter a valid 9-digit phone number")
    if not template_ids:
        errors.append("Please select at least one template")
    return errors


class MarketplaceClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def _request(self, method: str, path: str, **kwargs):
        resp = self.session.request(
            method,
            f"{self.base_url}{path}",
            headers=self._headers(),
            timeout=self.timeout,
            **kwargs,
        )
        try:
            body = resp.json()
        except ValueError:
            raise ApiError(resp.status_code, resp.text or resp.reason or "Invalid response")

        if resp.status_code >= 400 or not body.get("success", False):
            raise ApiError(resp.status_code, body.get("message") or "Request failed", body.get("data"))
        return body.get("data")

    def login(self, username: str, password: str) -> dict:
        data = self._request("POST", "/api/auth/login", json={"username": username, "password": password})
        self.token = data["token"]
        return data

    def logout(self) -> None:
        self.token = None

    def list_templates(self) -> List[dict]:
        return self._request("GET", "/api/templates")

    def initiate_payment(
        self,
        phone: str,
        template_ids: Sequence[int],
        amount,
        customer_name: str,
        customer_email: str,
    ) -> dict:
        return self._request("POST", "/api/payments/mpesa", json={
            "phone": phone,
            "amount": str(amount),
            "template_ids": list(template_ids),
            "customer_name": customer_name,
            "customer_email": customer_email,
        })

    def payment_status(self, transaction_id: str) -> dict:
        return self._request("GET", f"/api/payments/status/{transaction_id}")

    def download(self, transaction_id: str) -> bytes:
        resp = self.session.get(f"{self.base_url}/download/{transaction_id}", timeout=self.timeout)
        if resp.status_code != 200:
            raise ApiError(resp.status_code, "Download not found or expired")
        return resp.content


class PaymentStatusPoller:
    """
    Poll a transaction until it reaches a terminal status.

    Waits `interval` seconds between attempts, growing by `backoff` up to
    `max_interval`, and gives up after `deadline` seconds. Giving up does not
    cancel the transaction on the server.
    """

    def __init__(
        self,
        fetch_status: Callable[[str], dict],
        interval: float = 3.0,
        backoff: float = 1.5,
        max_interval: float = 10.0,
        deadline: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.fetch_status = fetch_status
        self.interval = interval
        self.backoff = backoff
        self.max_interval = max_interval
        self.deadline = deadline
        self.clock = clock
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def poll(self, transaction_id: str) -> dict:
        started = self.clock()
        delay = self.interval
        attempts = 0

        while True:
            if self.cancelled:
                raise PollCancelled(transaction_id)

            attempts += 1
            try:
                status = self.fetch_status(transaction_id)
            except requests.RequestException as e:
                logger.warning("Status check %d for %s failed: %s", attempts, transaction_id, e)
                status = None

            if status and status.get("status") in TERMINAL_STATUSES:
                return status

            remaining = self.deadline - (self.clock() - started)
            if remaining <= 0:
                raise PollTimeout(f"{transaction_id} still pending after {attempts} attempts")

            if self._cancelled.wait(min(delay, remaining)):
                raise PollCancelled(transaction_id)
            delay = min(delay * self.backoff, self.max_interval)
