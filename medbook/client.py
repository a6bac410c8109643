"""
MedBook HTTP client

Synchronous client over ``httpx`` for the MedBook API, with a small read cache.

Cache:
    Successful GET responses are cached by ``(path, params)``.
    - login / logout / register clear the whole cache (identity changed)
    - booking or changing an appointment's status drops ``/api/appointments`` entries
    - issuing a prescription drops ``/api/prescriptions`` and ``/api/appointments`` entries

Errors:
    Non-2xx responses raise ``MedbookAPIError`` carrying the server's message verbatim.

Example:
    with httpx.Client(base_url="http://localhost:8000") as http:
        client = MedbookClient(http)
        client.login("patient1", "password123")
        doctors = client.list_doctors(specialization="Cardiology")
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable

import httpx

from medbook.schemas import (
    AppointmentDetail,
    AppointmentResponse,
    DoctorDetail,
    HospitalResponse,
    PrescriptionResponse,
    UserResponse,
)

logger = logging.getLogger(__name__)


class MedbookAPIError(Exception):
    """
    Raised for any non-successful API response.

    Attributes:
        status_code: HTTP status returned by the server (0 for network failures)
        message: Human-readable message from the server
    """

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class MedbookClient:
    def __init__(self, http: httpx.Client):
        self._http = http
        self._cache: dict[tuple[str, tuple], Any] = {}

    # Cache handling

    @staticmethod
    def _key(path: str, params: dict[str, Any] | None) -> tuple[str, tuple]:
        items = tuple(sorted((k, str(v)) for k, v in (params or {}).items() if v is not None))
        return path, items

    def invalidate(self, *prefixes: str) -> None:
        """Drop cached entries under the given path prefixes, or everything when none given."""
        if not prefixes:
            self._cache.clear()
            return
        for key in [k for k in self._cache if k[0].startswith(prefixes)]:
            del self._cache[key]

    def is_cached(self, path: str, params: dict[str, Any] | None = None) -> bool:
        return self._key(path, params) in self._cache

    # Transport

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Request %s %s failed: %s", method, path, e)
            raise MedbookAPIError(0, "Network error") from e

        if response.is_error:
            try:
                message = response.json().get("message") or response.reason_phrase
            except ValueError:
                message = response.reason_phrase
            raise MedbookAPIError(response.status_code, message)
        return response

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        key = self._key(path, params)
        if key in self._cache:
            return self._cache[key]
        query = dict(key[1])
        data = self._request("GET", path, params=query or None).json()
        self._cache[key] = data
        return data

    # Authentication

    def register(self, payload: dict[str, Any]) -> UserResponse:
        data = self._request("POST", "/api/register", json=payload).json()
        self.invalidate()
        return UserResponse.model_validate(data)

    def login(self, username: str, password: str) -> UserResponse:
        data = self._request("POST", "/api/login", json={"username": username, "password": password}).json()
        self.invalidate()
        return UserResponse.model_validate(data)

    def logout(self) -> None:
        self._request("POST", "/api/logout")
        self.invalidate()

    def current_user(self) -> UserResponse | None:
        """The logged-in user, or ``None`` when the session is absent."""
        try:
            data = self._get("/api/user")
        except MedbookAPIError as e:
            if e.status_code == 401:
                return None
            raise
        return UserResponse.model_validate(data)

    # Directory

    def list_doctors(
        self,
        specialization: str | None = None,
        hospital_id: int | None = None,
        search: str | None = None,
    ) -> list[DoctorDetail]:
        params = {"specialization": specialization, "hospitalId": hospital_id, "search": search}
        return [DoctorDetail.model_validate(d) for d in self._get("/api/doctors", params)]

    def get_doctor(self, doctor_id: int) -> DoctorDetail:
        return DoctorDetail.model_validate(self._get(f"/api/doctors/{doctor_id}"))

    def list_hospitals(self) -> list[HospitalResponse]:
        return [HospitalResponse.model_validate(h) for h in self._get("/api/hospitals")]

    # Appointments

    def list_appointments(self) -> list[AppointmentDetail]:
        return [AppointmentDetail.model_validate(a) for a in self._get("/api/appointments")]

    def create_appointment(self, doctor_id: int, date: datetime | str, reason: str) -> AppointmentResponse:
        payload = {
            "doctorId": doctor_id,
            "date": date.isoformat() if isinstance(date, datetime) else date,
            "reason": reason,
        }
        data = self._request("POST", "/api/appointments", json=payload).json()
        self.invalidate("/api/appointments")
        return AppointmentResponse.model_validate(data)

    def update_appointment_status(self, appointment_id: int, status: str) -> AppointmentResponse:
        data = self._request("PATCH", f"/api/appointments/{appointment_id}/status", json={"status": status}).json()
        self.invalidate("/api/appointments")
        return AppointmentResponse.model_validate(data)

    # Prescriptions

    def list_prescriptions(self, appointment_id: int | None = None) -> list[PrescriptionResponse]:
        data = self._get("/api/prescriptions", {"appointmentId": appointment_id})
        return [PrescriptionResponse.model_validate(p) for p in data]

    def create_prescription(
        self,
        appointment_id: int,
        medicines: Iterable[dict[str, str]],
        instructions: str | None = None,
    ) -> PrescriptionResponse:
        payload = {"appointmentId": appointment_id, "medicines": list(medicines), "instructions": instructions}
        data = self._request("POST", "/api/prescriptions", json=payload).json()
        self.invalidate("/api/prescriptions", "/api/appointments")
        return PrescriptionResponse.model_validate(data)
