"""Core domain models for the triage queue, gestures and classification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class Asset:
    """Identity record for a single photo owned by an asset source."""

    asset_id: str
    pixel_width: int
    pixel_height: int
    creation_date: datetime | None = None
    # Backing file for sources that keep photos on disk
    file_path: str | None = None


@dataclass(frozen=True)
class Classification:
    """Raw output of a classifier call."""

    label: str
    confidence: float


class ClassificationState(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass
class ClassificationResult:
    """Cached classification entry for one asset.

    Attributes:
        asset_id: Identifier of the classified asset.
        token: Request token; the highest token recorded for an asset wins.
        state: Lifecycle state of the request.
        label: Label once resolved.
        confidence: Confidence in [0, 1] once resolved.
        error: Failure reason when the request failed.
    """

    asset_id: str
    token: int
    state: ClassificationState = ClassificationState.PENDING
    label: str | None = None
    confidence: float | None = None
    error: str | None = None


class Transition(str, Enum):
    DELETE = "delete"
    ADVANCE = "advance"
    CANCEL = "cancel"


class GesturePhase(str, Enum):
    CHANGED = "changed"
    ENDED = "ended"


@dataclass(frozen=True)
class GestureEvent:
    phase: GesturePhase
    magnitude: float = 0.0


@dataclass
class TriageSession:
    """Transient drag state; the offset is reset after every gesture."""

    delete_threshold: float = -100.0
    advance_threshold: float = 100.0
    offset: float = 0.0


class PermissionState(str, Enum):
    UNDETERMINED = "undetermined"
    GRANTED = "granted"
    LIMITED = "limited"
    DENIED = "denied"

    @property
    def is_granted(self) -> bool:
        """True for full and limited access."""
        return self in (PermissionState.GRANTED, PermissionState.LIMITED)


@dataclass
class ScanReport:
    """Progress and outcome of a folder import.

    Attributes:
        root: Folder that was scanned.
        files_seen: Image files yielded by the scan.
        imported_ids: Identifiers of assets appended to the queue.
        failed: Tuples of (path, reason) for files that could not be imported.
        finished: Whether every yielded file has completed.
    """

    root: str
    files_seen: int = 0
    imported_ids: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)
    finished: bool = False
