"""Reconciliation outcome and run report models."""

from datetime import datetime, timezone
from enum import Enum, IntEnum

from pydantic import BaseModel, Field

from ipam_firewall_sync.models.common import AddressFamily, ErrorDetail


class RunStatus(IntEnum):
    """Result of a run request, doubling as the process exit code."""

    SUCCESS = 0
    ALREADY_RUNNING = 7


class Action(str, Enum):
    """Kind of call issued against a target."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    SKIP = "skip"


class ObjectKind(str, Enum):
    """Kind of object an action applies to."""

    ADDRESS = "address"
    ADDRESS_GROUP = "address_group"
    SECURITY_GROUP = "security_group"


class Outcome(BaseModel):
    """Tagged result of one attempted action."""

    model_config = {"frozen": True}

    action: Action = Field(description="Action attempted")
    kind: ObjectKind = Field(description="Object kind")
    name: str = Field(description="Object name")
    success: bool = Field(description="Whether the action succeeded")
    error: ErrorDetail | None = Field(default=None, description="Failure detail")
    reason: str | None = Field(default=None, description="Why an action was skipped")

    @classmethod
    def ok(cls, action: Action, kind: ObjectKind, name: str) -> "Outcome":
        """Create a successful outcome."""
        return cls(action=action, kind=kind, name=name, success=True)

    @classmethod
    def fail(cls, action: Action, kind: ObjectKind, name: str, error: ErrorDetail) -> "Outcome":
        """Create a failed outcome."""
        return cls(action=action, kind=kind, name=name, success=False, error=error)

    @classmethod
    def skipped(cls, kind: ObjectKind, name: str, reason: str) -> "Outcome":
        """Create an outcome for an action deliberately not taken."""
        return cls(action=Action.SKIP, kind=kind, name=name, success=True, reason=reason)


class TargetReport(BaseModel):
    """Outcomes of reconciling one scope/family or one security-platform endpoint."""

    model_config = {"frozen": True}

    integrator: str = Field(description="Integrator name")
    target: str = Field(description="Target hostname")
    scope: str | None = Field(default=None, description="Scope on the target")
    family: AddressFamily | None = Field(default=None, description="Address family")
    skipped: bool = Field(default=False, description="Reconciliation was not attempted")
    reason: str | None = Field(default=None, description="Why the target was skipped")
    outcomes: list[Outcome] = Field(default_factory=list, description="Per-action outcomes")

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.success and o.action != Action.SKIP)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.success)

    def by_action(self, action: Action) -> list[Outcome]:
        """Filter outcomes by action."""
        return [o for o in self.outcomes if o.action == action]


class RunReport(BaseModel):
    """Aggregate of one reconciliation run."""

    model_config = {"frozen": True}

    priority: str = Field(description="Priority class requested")
    started_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Run start timestamp",
    )
    finished_at: datetime | None = Field(default=None, description="Run end timestamp")
    integrators_processed: list[str] = Field(default_factory=list)
    integrators_skipped: list[str] = Field(default_factory=list)
    targets: list[TargetReport] = Field(default_factory=list)

    @property
    def failed(self) -> int:
        """Number of failed actions across all targets."""
        return sum(t.failed for t in self.targets)

    @property
    def succeeded(self) -> int:
        """Number of successful actions across all targets."""
        return sum(t.succeeded for t in self.targets)

    @property
    def skipped_targets(self) -> list[TargetReport]:
        return [t for t in self.targets if t.skipped]
