"""
Tests for AuxiliaryEquipmentService.

The machine side owns links: auxiliary equipment writes never set
``linked_equipment_id`` themselves, but deleting an item must remove it
from every machine that lists it.
"""

import pytest

from equiprent.domain.models import (
    ConcurrentModificationError,
    ConsistencyWriteError,
    ImageSetChange,
    ValidationError,
)


class TestAuxiliaryEquipmentMutations:

    def test_create_starts_unlinked(self, aux_service, make_aux):
        aux = aux_service.create(make_aux(linked_equipment_id="m-anything"))
        assert aux.linked_equipment_id is None
        assert aux_service.require(aux.id).linked_equipment_id is None

    def test_create_validates(self, aux_service, make_aux, document_store):
        with pytest.raises(ValidationError):
            aux_service.create(make_aux(name=""))
        assert document_store.writes == []

    def test_update_keeps_stored_link(self, machines, aux_service, make_machine, make_aux):
        aux = aux_service.create(make_aux())
        m1 = machines.create(make_machine(linked_auxiliary_equipment_ids=[aux.id]))

        aux.name = "Battery 80V"
        aux.linked_equipment_id = None
        updated = aux_service.update(aux.id, aux)

        assert updated.linked_equipment_id == m1.id
        assert aux_service.require(aux.id).name == "Battery 80V"
        assert aux_service.require(aux.id).linked_equipment_id == m1.id

    def test_images_capped_at_five(self, aux_service, make_aux, make_file):
        files = [make_file(f"{i}.jpg") for i in range(6)]
        with pytest.raises(ValidationError):
            aux_service.create(make_aux(), {"images": ImageSetChange(new_files=files)})

    def test_images_stored_under_auxiliary_directory(self, aux_service, make_aux, make_file):
        aux = aux_service.create(make_aux(), {"images": make_file("a.jpg")})
        assert f"auxiliary_equipment_images/{aux.id}/image_" in aux.image_urls[0]

    def test_delete_removes_from_every_listing_machine(
        self, machines, aux_service, make_machine, make_aux, document_store
    ):
        aux = aux_service.create(make_aux())
        other = aux_service.create(make_aux(name="Charger", type="Charger"))
        m1 = machines.create(make_machine(linked_auxiliary_equipment_ids=[aux.id, other.id]))
        # Corrupt data: a second machine lists the same item
        m2 = machines.create(make_machine())
        document_store.update("machines", m2.id, {"linked_auxiliary_equipment_ids": [aux.id]})

        aux_service.delete(aux.id)

        assert machines.require(m1.id).linked_auxiliary_equipment_ids == [other.id]
        assert machines.require(m2.id).linked_auxiliary_equipment_ids == []

    def test_delete_removes_images(self, aux_service, make_aux, make_file, object_store):
        aux = aux_service.create(make_aux(), {"images": make_file("a.jpg")})

        aux_service.delete(aux.id)

        assert not object_store.exists(aux.image_urls[0])

    def test_delete_aborts_when_machine_lookup_fails(self, aux_service, make_aux, document_store):
        aux = aux_service.create(make_aux())
        document_store.fail_queries = True

        with pytest.raises(ConsistencyWriteError):
            aux_service.delete(aux.id)

        assert aux_service.get(aux.id) is not None

    def test_delete_aborts_when_machine_changes_concurrently(
        self, machines, aux_service, make_machine, make_aux, document_store
    ):
        aux = aux_service.create(make_aux())
        m1 = machines.create(make_machine(linked_auxiliary_equipment_ids=[aux.id]))
        document_store.before_write = lambda: document_store.inner.update(
            "machines", m1.id, {"notes": "edited elsewhere"}
        )

        with pytest.raises(ConcurrentModificationError):
            aux_service.delete(aux.id)

        assert aux_service.get(aux.id) is not None
        assert machines.require(m1.id).linked_auxiliary_equipment_ids == [aux.id]


class TestAuxiliaryEquipmentReads:

    def test_list_unlinked_and_linked_to(self, machines, aux_service, make_machine, make_aux):
        linked = aux_service.create(make_aux(name="B"))
        free = aux_service.create(make_aux(name="A"))
        m1 = machines.create(make_machine(linked_auxiliary_equipment_ids=[linked.id]))

        assert [a.id for a in aux_service.list_unlinked()] == [free.id]
        assert [a.id for a in aux_service.linked_to(m1.id)] == [linked.id]
        assert [a.name for a in aux_service.list()] == ["A", "B"]

    def test_list_by_status(self, aux_service, make_aux):
        rented = aux_service.create(make_aux(status="Rented"))
        aux_service.create(make_aux())

        assert [a.id for a in aux_service.list_by_status("RENTED")] == [rented.id]
