"""Error taxonomy shared by the connector layer and the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass

from riskscreen.domain.model.enums import RETRYABLE_KINDS, ErrorKind


@dataclass(frozen=True, slots=True)
class ClassifiedError:
    kind: ErrorKind
    retryable: bool
    backoff_hint: float | None = None
    status_code: int | None = None
    message: str = ""

    @classmethod
    def of(
        cls,
        kind: ErrorKind,
        message: str = "",
        *,
        backoff_hint: float | None = None,
        status_code: int | None = None,
    ) -> ClassifiedError:
        return cls(
            kind=kind,
            retryable=kind in RETRYABLE_KINDS,
            backoff_hint=backoff_hint,
            status_code=status_code,
            message=message,
        )


class RiskScreenError(RuntimeError):
    """Base class for errors raised by the screening core."""


class InvalidInputError(RiskScreenError, ValueError):
    """Raised when an entity cannot be assessed at all."""

    kind = "invalid-input"

    def __init__(self, message: str, *, field: str = "name") -> None:
        super().__init__(message)
        self.field = field


class ConnectorError(RiskScreenError):
    """A connector call failed with an already classified error."""

    def __init__(self, connector_id: str, error: ClassifiedError) -> None:
        super().__init__(f"{connector_id}: {error.kind} {error.message}".rstrip())
        self.connector_id = connector_id
        self.error = error


class CircuitOpenError(ConnectorError):
    """Raised instead of calling a connector whose circuit is open."""

    def __init__(self, connector_id: str, *, retry_in: float | None = None) -> None:
        super().__init__(
            connector_id,
            ClassifiedError.of(
                ErrorKind.CIRCUIT_OPEN, "circuit open", backoff_hint=retry_in
            ),
        )
