"""
Link Integrity Domain Models.

Issues found when scanning both sides of a bidirectional link, and the
report that aggregates them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class IntegrityIssueType(Enum):
    """Kinds of link inconsistency."""
    DANGLING_FORWARD_REFERENCE = "dangling_forward_reference"
    DANGLING_BACK_REFERENCE = "dangling_back_reference"
    MISSING_BACK_REFERENCE = "missing_back_reference"
    MISSING_FORWARD_REFERENCE = "missing_forward_reference"
    MULTIPLE_PARENTS = "multiple_parents"


class IntegritySeverity(Enum):
    WARNING = "warning"
    ERROR = "error"


class RepairAction(Enum):
    """How check_and_repair resolves an issue."""
    REMOVE_FORWARD_REFERENCE = "remove_forward_reference"
    SET_BACK_REFERENCE = "set_back_reference"
    CLEAR_BACK_REFERENCE = "clear_back_reference"
    NONE = "none"


@dataclass
class IntegrityIssue:
    """One inconsistency between a parent and a child document."""
    issue_type: IntegrityIssueType
    severity: IntegritySeverity
    parent_id: Optional[str]
    child_id: str
    message: str
    repair_action: RepairAction = RepairAction.NONE
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def auto_repairable(self) -> bool:
        return self.repair_action != RepairAction.NONE

    @classmethod
    def dangling_forward(cls, parent_id: str, child_id: str) -> "IntegrityIssue":
        return cls(
            issue_type=IntegrityIssueType.DANGLING_FORWARD_REFERENCE,
            severity=IntegritySeverity.ERROR,
            parent_id=parent_id,
            child_id=child_id,
            message=f"Parent {parent_id} lists missing child {child_id}",
            repair_action=RepairAction.REMOVE_FORWARD_REFERENCE,
        )

    @classmethod
    def dangling_back(cls, parent_id: str, child_id: str) -> "IntegrityIssue":
        return cls(
            issue_type=IntegrityIssueType.DANGLING_BACK_REFERENCE,
            severity=IntegritySeverity.ERROR,
            parent_id=parent_id,
            child_id=child_id,
            message=f"Child {child_id} points at missing parent {parent_id}",
            repair_action=RepairAction.CLEAR_BACK_REFERENCE,
        )

    @classmethod
    def missing_back(cls, parent_id: str, child_id: str, actual: Optional[str]) -> "IntegrityIssue":
        return cls(
            issue_type=IntegrityIssueType.MISSING_BACK_REFERENCE,
            severity=IntegritySeverity.ERROR,
            parent_id=parent_id,
            child_id=child_id,
            message=f"Parent {parent_id} lists child {child_id} but child points at {actual}",
            repair_action=RepairAction.SET_BACK_REFERENCE,
            details={"actual_parent_id": actual},
        )

    @classmethod
    def missing_forward(cls, parent_id: str, child_id: str) -> "IntegrityIssue":
        return cls(
            issue_type=IntegrityIssueType.MISSING_FORWARD_REFERENCE,
            severity=IntegritySeverity.WARNING,
            parent_id=parent_id,
            child_id=child_id,
            message=f"Child {child_id} points at {parent_id} which does not list it",
            repair_action=RepairAction.CLEAR_BACK_REFERENCE,
        )

    @classmethod
    def multiple_parents(cls, child_id: str, parent_ids: List[str]) -> "IntegrityIssue":
        # Resolved by keeping the parent the child points at; not auto-repaired.
        return cls(
            issue_type=IntegrityIssueType.MULTIPLE_PARENTS,
            severity=IntegritySeverity.ERROR,
            parent_id=None,
            child_id=child_id,
            message=f"Child {child_id} is listed by several parents: {', '.join(parent_ids)}",
            details={"parent_ids": list(parent_ids)},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "issue_type": self.issue_type.value,
            "severity": self.severity.value,
            "parent_id": self.parent_id,
            "child_id": self.child_id,
            "message": self.message,
            "repair_action": self.repair_action.value,
            "details": dict(self.details),
        }


@dataclass
class IntegrityReport:
    """Result of one integrity check run."""
    issues: List[IntegrityIssue] = field(default_factory=list)
    total_checked: int = 0
    repaired_count: int = 0
    repair_failed_count: int = 0
    duration_ms: float = 0.0
    checked_at: datetime = field(default_factory=datetime.now)

    def add_issue(self, issue: IntegrityIssue) -> None:
        self.issues.append(issue)

    @property
    def is_healthy(self) -> bool:
        return not self.issues

    @property
    def error_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == IntegritySeverity.ERROR)

    def issues_of(self, issue_type: IntegrityIssueType) -> List[IntegrityIssue]:
        return [i for i in self.issues if i.issue_type == issue_type]

    def summary(self) -> str:
        if self.is_healthy:
            return f"OK: {self.total_checked} documents checked, no issues"
        counts: Dict[str, int] = {}
        for issue in self.issues:
            counts[issue.issue_type.value] = counts.get(issue.issue_type.value, 0) + 1
        parts = ", ".join(f"{name}={count}" for name, count in sorted(counts.items()))
        return (
            f"{len(self.issues)} issues in {self.total_checked} documents ({parts}); "
            f"repaired={self.repaired_count} failed={self.repair_failed_count}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "healthy": self.is_healthy,
            "total_checked": self.total_checked,
            "repaired_count": self.repaired_count,
            "repair_failed_count": self.repair_failed_count,
            "duration_ms": self.duration_ms,
            "checked_at": self.checked_at.isoformat(),
            "issues": [i.to_dict() for i in self.issues],
        }


__all__ = [
    "IntegrityIssueType",
    "IntegritySeverity",
    "RepairAction",
    "IntegrityIssue",
    "IntegrityReport",
]
