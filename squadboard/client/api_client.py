# squadboard/client/api_client.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from squadboard.client.records import PersonRecord, TaskRecord


class TaskApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None, detail: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class TaskValidationError(TaskApiError):
    pass


class TaskNotFoundError(TaskApiError):
    pass


class TaskServerError(TaskApiError):
    pass


class TaskTransportError(TaskApiError):
    pass


class TaskApiInvalidResponseError(TaskApiError):
    pass


def _detail(response: httpx.Response) -> Any:
    try:
        body = response.json()
    except ValueError:
        return response.text or None
    if isinstance(body, dict):
        return body.get("detail", body.get("error", body))
    return body


class TaskApiClient:
    """Async client for the ``/api`` task endpoints.

    Every failure is raised as a ``TaskApiError`` subclass so callers only have
    one family of exceptions to deal with.
    """

    def __init__(self, client: httpx.AsyncClient, base_path: str = "/api"):
        self._client = client
        self.base_path = base_path.rstrip("/")
        self.logger = logging.getLogger("squadboard.client")

    # -------------------------
    # Tasks
    # -------------------------

    async def list_tasks(self) -> list[TaskRecord]:
        body = await self._request("GET", "/tasks")
        return [self._decode(TaskRecord, item) for item in body or []]

    async def get_task(self, task_id: str) -> TaskRecord:
        return self._decode(TaskRecord, await self._request("GET", f"/tasks/{task_id}"))

    async def create_task(self, payload: Dict[str, Any]) -> TaskRecord:
        return self._decode(TaskRecord, await self._request("POST", "/tasks", json=payload))

    async def update_task(self, task_id: str, changes: Dict[str, Any]) -> TaskRecord:
        body = await self._request("PUT", f"/tasks/{task_id}", json=changes)
        return self._decode(TaskRecord, body)

    async def delete_task(self, task_id: str) -> None:
        await self._request("DELETE", f"/tasks/{task_id}")

    # -------------------------
    # People
    # -------------------------

    async def list_people(self, person_type: Optional[str] = None) -> list[PersonRecord]:
        params = {"type": person_type} if person_type else None
        body = await self._request("GET", "/people", params=params)
        return [self._decode(PersonRecord, item) for item in body or []]

    async def list_coaches(self) -> list[PersonRecord]:
        return await self.list_people("coach")

    async def list_athletes(self) -> list[PersonRecord]:
        return await self.list_people("athlete")

    # -------------------------
    # Transport helpers
    # -------------------------

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_path}{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            self.logger.error("api_timeout", extra={"method": method, "path": path})
            raise TaskTransportError(f"{method} {url} timed out") from exc
        except httpx.HTTPError as exc:
            self.logger.error("api_transport_error", extra={"method": method, "path": path})
            raise TaskTransportError(f"{method} {url} failed: {exc}") from exc

        self._raise_for_status(method, url, response)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise TaskApiInvalidResponseError(
                f"{method} {url} returned a non-JSON body", response.status_code
            ) from exc

    def _raise_for_status(self, method: str, url: str, response: httpx.Response) -> None:
        status = response.status_code
        if status < 400:
            return

        detail = _detail(response)
        self.logger.warning("api_error_response", extra={"method": method, "path": url, "status_code": status})
        message = f"{method} {url} -> {status}"
        if status == 404:
            raise TaskNotFoundError(message, status, detail)
        if status < 500:
            raise TaskValidationError(message, status, detail)
        raise TaskServerError(message, status, detail)

    @staticmethod
    def _decode(model, body: Any):
        try:
            return model.model_validate(body)
        except ValidationError as exc:
            raise TaskApiInvalidResponseError(f"Unexpected {model.__name__} payload") from exc
