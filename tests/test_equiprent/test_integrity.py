"""
Tests for LinkIntegrityChecker and the integrity report model.
"""

import pytest

from equiprent.domain.models import (
    IntegrityIssue,
    IntegrityIssueType,
    IntegrityReport,
    MACHINE_AUXILIARY_LINK,
    RepairAction,
)
from equiprent.infrastructure.database import InMemoryDocumentStore
from equiprent.infrastructure.integrity import LinkIntegrityChecker
from equiprent.testing import RecordingDocumentStore

FORWARD = "linked_auxiliary_equipment_ids"
BACK = "linked_equipment_id"


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def checker(store):
    return LinkIntegrityChecker(store, MACHINE_AUXILIARY_LINK)


def machine(store, machine_id, *aux_ids):
    store.set("machines", machine_id, {"brand": "B", FORWARD: list(aux_ids)})


def aux(store, aux_id, parent=None):
    store.set("auxiliary_equipment", aux_id, {"name": aux_id, BACK: parent})


class TestIntegrityReport:

    def test_healthy_summary(self):
        report = IntegrityReport(total_checked=4)
        assert report.is_healthy
        assert report.summary() == "OK: 4 documents checked, no issues"

    def test_counts(self):
        report = IntegrityReport(total_checked=2)
        report.add_issue(IntegrityIssue.dangling_forward("m1", "a1"))
        report.add_issue(IntegrityIssue.missing_forward("m1", "a2"))

        assert report.error_count == 1
        assert "dangling_forward_reference=1" in report.summary()
        assert report.to_dict()["issues"][1]["repair_action"] == "clear_back_reference"

    def test_multiple_parents_not_auto_repairable(self):
        issue = IntegrityIssue.multiple_parents("a1", ["m1", "m2"])
        assert not issue.auto_repairable
        assert issue.details == {"parent_ids": ["m1", "m2"]}


class TestLinkIntegrityChecker:

    def test_consistent_data_is_healthy(self, store, checker):
        machine(store, "m1", "a1")
        aux(store, "a1", "m1")
        aux(store, "a2")

        report = checker.check()

        assert report.is_healthy
        assert report.total_checked == 3

    def test_detects_every_kind(self, store, checker):
        machine(store, "m1", "ghost", "a1")       # dangling forward, missing back on a1
        machine(store, "m2")
        aux(store, "a1")
        aux(store, "a2", "m-gone")                # dangling back
        aux(store, "a3", "m2")                    # missing forward

        report = checker.check()
        kinds = {i.issue_type for i in report.issues}

        assert kinds == {
            IntegrityIssueType.DANGLING_FORWARD_REFERENCE,
            IntegrityIssueType.MISSING_BACK_REFERENCE,
            IntegrityIssueType.DANGLING_BACK_REFERENCE,
            IntegrityIssueType.MISSING_FORWARD_REFERENCE,
        }

    def test_repair_restores_consistency(self, store, checker):
        machine(store, "m1", "ghost", "a1")
        machine(store, "m2")
        aux(store, "a1")
        aux(store, "a2", "m-gone")
        aux(store, "a3", "m2")

        report = checker.check_and_repair()

        assert report.repaired_count == 4
        assert store.get("machines", "m1").data[FORWARD] == ["a1"]
        assert store.get("auxiliary_equipment", "a1").data[BACK] == "m1"
        assert store.get("auxiliary_equipment", "a2").data[BACK] is None
        assert store.get("auxiliary_equipment", "a3").data[BACK] is None
        assert checker.check().is_healthy

    def test_multiple_parents_left_for_manual_fix(self, store, checker):
        machine(store, "m1", "a1")
        machine(store, "m2", "a1")
        aux(store, "a1", "m1")

        report = checker.check_and_repair()

        multi = report.issues_of(IntegrityIssueType.MULTIPLE_PARENTS)
        assert len(multi) == 1
        assert all(i.repair_action == RepairAction.NONE for i in report.issues)
        assert report.repaired_count == 0
        assert store.get("auxiliary_equipment", "a1").data[BACK] == "m1"

    def test_failed_repair_is_counted(self):
        recording = RecordingDocumentStore()
        machine(recording.inner, "m1", "ghost")
        recording.fail_writes = True
        checker = LinkIntegrityChecker(recording, MACHINE_AUXILIARY_LINK)

        report = checker.check_and_repair()

        assert report.repaired_count == 0
        assert report.repair_failed_count == 1
        assert recording.inner.get("machines", "m1").data[FORWARD] == ["ghost"]

    def test_service_writes_stay_healthy(self, services, make_machine, make_aux):
        a1 = services.auxiliary_equipment.create(make_aux())
        a2 = services.auxiliary_equipment.create(make_aux(name="Charger", type="Charger"))
        m1 = services.machines.create(make_machine(linked_auxiliary_equipment_ids=[a1.id, a2.id]))
        m1.linked_auxiliary_equipment_ids = [a2.id]
        services.machines.update(m1.id, m1)
        services.auxiliary_equipment.delete(a2.id)

        assert services.integrity_checker.check().is_healthy
