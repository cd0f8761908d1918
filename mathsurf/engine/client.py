"""HTTP client for the tutoring backend's step orchestrator.

The client keeps all HTTP wiring local; ``_requests_post`` is the single
transport seam so tests can run offline.
"""

from __future__ import annotations

import os
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from mathsurf.latex.paths import is_valid_path
from mathsurf.surface.classifier import SurfaceKind
from mathsurf.surface.node import SurfaceNode

STEP_ENDPOINT = "/api/orchestrator/v5/step"
DEFAULT_ENGINE_URL = "http://localhost:4201"
DEFAULT_TIMEOUT_S = 5.0

StepStatus = Literal["step-applied", "no-candidates", "engine-error", "choice"]


class EngineError(Exception):
    """Transport or protocol failure talking to the backend."""

    def __init__(self, *, kind: str, message: str, retryable: bool) -> None:
        self.kind = kind
        self.message = message
        self.retryable = retryable
        super().__init__(self.__str__())

    def __str__(self) -> str:
        return f"EngineError(kind={self.kind!r}, retryable={self.retryable}): {self.message}"


class StepRequest(BaseModel):
    """Request to apply one step at ``selection_path``."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    session_id: str | None = Field(default="default-session", alias="sessionId")
    expression_latex: str = Field(alias="expressionLatex", min_length=1)
    selection_path: str | None = Field(default=None, alias="selectionPath")
    operator_index: int | None = Field(default=None, alias="operatorIndex", ge=0)
    preferred_primitive_id: str | None = Field(default=None, alias="preferredPrimitiveId")
    surface_node_kind: str | None = Field(default=None, alias="surfaceNodeKind")
    course_id: str = Field(default="default", alias="courseId")
    user_role: str = Field(default="student", alias="userRole")

    @field_validator("selection_path")
    @classmethod
    def _check_path(cls, value: str | None) -> str | None:
        if value is not None and not is_valid_path(value):
            raise ValueError(f"invalid structural path: {value!r}")
        return value

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class StepChoice(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    label: str
    primitive_id: str = Field(alias="primitiveId")
    target_node_id: str | None = Field(default=None, alias="targetNodeId")


class StepResult(BaseModel):
    """Normalized backend answer; ``raw`` keeps the decoded response body."""

    model_config = ConfigDict(populate_by_name=True)

    status: StepStatus
    primitive_id: str | None = Field(default=None, alias="primitiveId")
    new_expression_latex: str | None = Field(default=None, alias="newExpressionLatex")
    choices: list[StepChoice] = Field(default_factory=list)
    error: str | None = None
    raw: dict | None = None

    @classmethod
    def engine_error(cls, message: str, raw: dict | None = None) -> "StepResult":
        return cls(status="engine-error", error=message, raw=raw)


def build_step_request(
    latex: str,
    node: SurfaceNode,
    *,
    preferred_primitive_id: str | None = None,
    session_id: str | None = "default-session",
) -> StepRequest:
    """Build a request from a clicked, correlated surface node.

    The structural path is preferred; the surface operator index is only sent
    when the node has no path.
    """

    operator_index = None if node.ast_node_id else node.operator_index
    return StepRequest(
        session_id=session_id,
        expression_latex=latex,
        selection_path=node.ast_node_id,
        operator_index=operator_index,
        preferred_primitive_id=preferred_primitive_id,
        surface_node_kind=SurfaceKind(node.kind).value,
    )


class EngineClient:
    """Synchronous client for ``POST <base>/api/orchestrator/v5/step``."""

    def __init__(self, *, base_url: str | None = None, timeout_s: float | None = None) -> None:
        self.base_url = base_url or os.getenv("MATHSURF_ENGINE_URL") or DEFAULT_ENGINE_URL
        if timeout_s is None:
            env_timeout = os.getenv("MATHSURF_ENGINE_TIMEOUT_S")
            timeout_s = float(env_timeout) if env_timeout else DEFAULT_TIMEOUT_S
        self.timeout_s = timeout_s
        self.last_request_json: dict | None = None
        self.last_response_json: dict | None = None

    @property
    def step_url(self) -> str:
        return self.base_url.rstrip("/") + STEP_ENDPOINT

    def run_step(self, request: StepRequest) -> StepResult:
        """Send ``request``; every failure becomes an ``engine-error`` result."""

        try:
            return self._run_step(request)
        except EngineError as exc:
            return StepResult.engine_error(str(exc), raw=self.last_response_json)

    def _run_step(self, request: StepRequest) -> StepResult:
        payload = request.to_payload()
        self.last_request_json = payload
        self.last_response_json = None

        try:
            response = _requests_post(self.step_url, json=payload, timeout=self.timeout_s)
        except EngineError:
            raise
        except Exception as exc:
            if exc.__class__.__name__ in {"Timeout", "ReadTimeout", "ConnectTimeout"}:
                raise EngineError(kind="timeout", message=str(exc), retryable=True) from exc
            if exc.__class__.__module__.startswith("requests"):
                raise EngineError(kind="network", message=str(exc), retryable=True) from exc
            raise EngineError(kind="network", message=repr(exc), retryable=False) from exc

        if response.status_code != 200:
            raise EngineError(
                kind="http",
                message=f"HTTP {response.status_code}: {response.text}",
                retryable=response.status_code >= 500 or response.status_code == 429,
            )

        try:
            body = response.json()
        except Exception as exc:
            raise EngineError(
                kind="bad_response",
                message=f"Malformed JSON response: {exc}",
                retryable=False,
            ) from exc
        if not isinstance(body, dict):
            raise EngineError(kind="bad_response", message="Response body is not an object.", retryable=False)
        self.last_response_json = body
        return _result_from_body(body)


def _nested_object(body: dict, key: str) -> dict:
    value = body.get(key) or {}
    if not isinstance(value, dict):
        raise EngineError(
            kind="bad_response",
            message=f"Unexpected response shape: {key} is {type(value).__name__}, expected object",
            retryable=False,
        )
    return value


def _result_from_body(body: dict) -> StepResult:
    engine_result = _nested_object(body, "engineResult")
    primitive_id = body.get("primitiveId")
    if primitive_id is None:
        primitive_id = _nested_object(body, "primitiveDebug").get("primitiveId")
    error = None
    if engine_result and not engine_result.get("ok", True):
        error = engine_result.get("errorCode")

    try:
        return StepResult(
            status=body.get("status") or "engine-error",
            primitive_id=primitive_id,
            new_expression_latex=engine_result.get("newExpressionLatex"),
            choices=body.get("choices") or [],
            error=error,
            raw=body,
        )
    except ValidationError as exc:
        raise EngineError(
            kind="bad_response",
            message=f"Unexpected response shape: {exc.error_count()} validation error(s)",
            retryable=False,
        ) from exc


def _requests_post(url: str, *, json: dict, timeout: float):
    """POST helper to isolate requests dependency for easier offline mocking."""

    try:
        import requests
    except Exception as exc:
        raise EngineError(
            kind="network",
            message=f"requests dependency unavailable: {exc}",
            retryable=False,
        ) from exc
    return requests.post(url, json=json, timeout=timeout)
