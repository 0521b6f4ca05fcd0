"""
Pytest fixtures for equiprent tests.
"""

import pytest

from equiprent.application.factories import ServiceFactory
from equiprent.domain.models import AuxiliaryEquipment, FileUpload, Machine
from equiprent.testing import CallLog, RecordingDocumentStore, RecordingObjectStore


# ═══════════════════════════════════════════════════════════════════════════════
# Builders
# ═══════════════════════════════════════════════════════════════════════════════

_counter = {"chassis": 0}


def build_machine(**overrides) -> Machine:
    _counter["chassis"] += 1
    data = dict(
        brand="Toyota",
        model="8FGU25",
        chassis_number=f"CH-{_counter['chassis']:04d}",
        equipment_type="Counterbalance Forklift LPG",
        owner_reference="goldmaq",
    )
    data.update(overrides)
    return Machine(**data)


def build_aux(**overrides) -> AuxiliaryEquipment:
    data = dict(name="Battery 48V", type="Battery", serial_number="BAT-1")
    data.update(overrides)
    return AuxiliaryEquipment(**data)


def build_file(name: str = "photo.jpg", content: bytes = b"binary-content") -> FileUpload:
    return FileUpload(name, content, "application/octet-stream")


# ═══════════════════════════════════════════════════════════════════════════════
# Store and service fixtures
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.fixture
def call_log():
    return CallLog()


@pytest.fixture
def object_store(call_log):
    return RecordingObjectStore(call_log)


@pytest.fixture
def document_store(call_log):
    return RecordingDocumentStore(call_log)


@pytest.fixture
def services(document_store, object_store):
    return ServiceFactory.create_with_stores(document_store, object_store, orphan_grace_period_minutes=0)


@pytest.fixture
def machines(services):
    return services.machines


@pytest.fixture
def aux_service(services):
    return services.auxiliary_equipment


@pytest.fixture
def make_machine():
    return build_machine


@pytest.fixture
def make_aux():
    return build_aux


@pytest.fixture
def make_file():
    return build_file


@pytest.fixture
def linked_fleet(aux_service):
    """Three stored, unlinked auxiliary items."""
    return [
        aux_service.create(build_aux(name=f"Aux {i}", serial_number=f"S-{i}"))
        for i in (1, 2, 3)
    ]


def assert_links_consistent(document_store):
    """Both sides of every machine/auxiliary link agree."""
    machines = {s.id: s.data for s in document_store.list("machines")}
    auxes = {s.id: s.data for s in document_store.list("auxiliary_equipment")}
    for machine_id, data in machines.items():
        for aux_id in data.get("linked_auxiliary_equipment_ids") or []:
            assert aux_id in auxes, f"{machine_id} lists missing {aux_id}"
            assert auxes[aux_id].get("linked_equipment_id") == machine_id
    for aux_id, data in auxes.items():
        parent = data.get("linked_equipment_id")
        if parent:
            assert parent in machines, f"{aux_id} points at missing {parent}"
            assert aux_id in machines[parent]["linked_auxiliary_equipment_ids"]


@pytest.fixture
def check_links(document_store):
    return lambda: assert_links_consistent(document_store)
