"""
Link Integrity Checker.

Scans both sides of a bidirectional link and reports documents whose
forward lists and back references disagree. Repairs treat the parents'
forward lists as authoritative.
"""

from typing import Dict, List, Set
import logging
import time

from equiprent.domain.interfaces.document_store import IDocumentStore, WriteBatch
from equiprent.domain.models.integrity import (
    IntegrityIssue,
    IntegrityIssueType,
    IntegrityReport,
    RepairAction,
)
from equiprent.domain.models.links import LinkSpec, ordered_unique

logger = logging.getLogger(__name__)


class LinkIntegrityChecker:
    """
    Integrity checker for one LinkSpec.

    Checks:
    - Dangling forward references (parent lists a missing child)
    - Dangling back references (child points at a missing parent)
    - One-sided links in either direction
    - Children listed by more than one parent

    Usage:
        checker = LinkIntegrityChecker(store, MACHINE_AUXILIARY_LINK)
        report = checker.check()
        print(report.summary())

        report = checker.check_and_repair()
        print(f"Repaired {report.repaired_count} issues")
    """

    def __init__(self, document_store: IDocumentStore, link: LinkSpec):
        self._store = document_store
        self._link = link

    def check(self) -> IntegrityReport:
        """
        Execute full integrity check.

        Returns:
            IntegrityReport with all found issues
        """
        start_time = time.time()
        report = IntegrityReport()
        link = self._link

        logger.info(f"Starting integrity check of {link.parent_collection} ⇄ {link.child_collection}...")

        parents = {s.id: s for s in self._store.list(link.parent_collection)}
        children = {s.id: s for s in self._store.list(link.child_collection)}
        report.total_checked = len(parents) + len(children)

        listed_by: Dict[str, List[str]] = {}
        for parent_id, parent in parents.items():
            for child_id in ordered_unique(parent.data.get(link.forward_field)):
                listed_by.setdefault(child_id, []).append(parent_id)
                child = children.get(child_id)
                if child is None:
                    report.add_issue(IntegrityIssue.dangling_forward(parent_id, child_id))
                    continue
                back = child.data.get(link.back_field)
                if back != parent_id:
                    report.add_issue(IntegrityIssue.missing_back(parent_id, child_id, back))

        for child_id, parent_ids in listed_by.items():
            if len(parent_ids) > 1 and child_id in children:
                report.add_issue(IntegrityIssue.multiple_parents(child_id, parent_ids))
                # Needs a human decision; leave its back reference alone
                for issue in report.issues_of(IntegrityIssueType.MISSING_BACK_REFERENCE):
                    if issue.child_id == child_id:
                        issue.repair_action = RepairAction.NONE

        for child_id, child in children.items():
            back = child.data.get(link.back_field)
            if not back:
                continue
            if back not in parents:
                report.add_issue(IntegrityIssue.dangling_back(back, child_id))
            elif back not in listed_by.get(child_id, []):
                report.add_issue(IntegrityIssue.missing_forward(back, child_id))

        report.duration_ms = (time.time() - start_time) * 1000

        logger.info(f"Integrity check completed: {report.summary()}")
        return report

    def check_and_repair(self) -> IntegrityReport:
        """
        Execute integrity check and repair every auto-repairable issue in
        one atomic write.

        Returns:
            IntegrityReport with repair results
        """
        report = self.check()
        repairable = [issue for issue in report.issues if issue.auto_repairable]
        if not repairable:
            return report

        batch = self._repair_batch(repairable)
        try:
            self._store.atomic_write(batch)
            report.repaired_count = len(repairable)
            logger.info(f"Repaired {len(repairable)} issues with {len(batch)} writes")
        except Exception as e:
            logger.error(f"Failed to repair issues: {e}")
            report.repair_failed_count = len(repairable)
        return report

    # ═══════════════════════════════════════════════════════════════════════════
    # Repair
    # ═══════════════════════════════════════════════════════════════════════════

    def _repair_batch(self, issues: List[IntegrityIssue]) -> WriteBatch:
        link = self._link
        drop_forward: Dict[str, Set[str]] = {}
        back_values: Dict[str, object] = {}

        for issue in issues:
            if issue.repair_action == RepairAction.REMOVE_FORWARD_REFERENCE:
                drop_forward.setdefault(issue.parent_id, set()).add(issue.child_id)
            elif issue.repair_action == RepairAction.SET_BACK_REFERENCE:
                back_values[issue.child_id] = issue.parent_id
            elif issue.repair_action == RepairAction.CLEAR_BACK_REFERENCE:
                back_values.setdefault(issue.child_id, None)

        batch = WriteBatch()
        for parent_id, child_ids in drop_forward.items():
            parent = self._store.get(link.parent_collection, parent_id)
            if parent is None:
                continue
            kept = [i for i in ordered_unique(parent.data.get(link.forward_field)) if i not in child_ids]
            batch.update(link.parent_collection, parent_id, {link.forward_field: kept},
                         expected_version=parent.version)

        for child_id, value in back_values.items():
            child = self._store.get(link.child_collection, child_id)
            if child is None:
                continue
            batch.update(link.child_collection, child_id, {link.back_field: value},
                         expected_version=child.version)
        return batch

