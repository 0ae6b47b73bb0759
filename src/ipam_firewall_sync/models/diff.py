"""Set-difference result model."""

from pydantic import BaseModel, Field


class DiffResult(BaseModel):
    """Identifiers added to and removed from a collection."""

    model_config = {"frozen": True}

    added: list[str] = Field(default_factory=list, description="Present only in the desired state")
    removed: list[str] = Field(default_factory=list, description="Present only in the observed state")

    @property
    def has_changes(self) -> bool:
        """Check if anything was added or removed."""
        return bool(self.added or self.removed)
