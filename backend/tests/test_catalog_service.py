"""CatalogService contract tests."""

import pytest

from fabricstore.errors import BusinessRuleError, ConflictError, NotFoundError


class TestCatalogCreate:

    def test_code_upper_cased(self, catalog):
        assert catalog.code == "CTN-001"
        assert catalog.status == "active"

    def test_duplicate_code_case_insensitive(self, services, catalog, admin_user):
        with pytest.raises(ConflictError) as exc:
            services.catalogs.create(
                {"code": "Ctn-001", "name": "Another Cotton", "material": "Cotton"},
                admin_user.id,
            )
        assert exc.value.conflicting_field == "code"

    def test_lookup_by_code(self, services, catalog):
        assert services.catalogs.get_by_code("ctn-001").id == catalog.id
        with pytest.raises(NotFoundError):
            services.catalogs.get_by_code("NOPE")


class TestCatalogUpdate:

    @pytest.mark.parametrize("code", ["CTN-001", "NEW-001", None, "", "   ", "X" * 30])
    def test_code_immutable(self, services, catalog, admin_user, code):
        with pytest.raises(BusinessRuleError) as exc:
            services.catalogs.update(catalog.id, {"code": code, "name": "Renamed"}, admin_user.id)
        assert exc.value.code == "IMMUTABLE_FIELD"
        assert exc.value.metadata["field"] == "code"
        refreshed = services.catalogs.get_by_id(catalog.id)
        assert (refreshed.code, refreshed.name) == ("CTN-001", "Premium Cotton")

    def test_archive_guard(self, services, catalog, make_roll, admin_user):
        roll = make_roll("R-1")
        services.rolls.update(roll.id, {"status": "reserved"}, admin_user.id)

        with pytest.raises(BusinessRuleError) as exc:
            services.catalogs.update(catalog.id, {"status": "archived"}, admin_user.id)
        assert exc.value.code == "CANNOT_ARCHIVE_WITH_ROLLS"
        assert services.catalogs.get_by_id(catalog.id).status == "active"

        services.rolls.update(roll.id, {"status": "sold"}, admin_user.id)
        archived = services.catalogs.update(catalog.id, {"status": "archived"}, admin_user.id)
        assert archived.status == "archived"

    def test_update_fields_and_audit(self, services, catalog, admin_user):
        services.catalogs.update(catalog.id, {"name": "Cotton Deluxe", "description": ""}, admin_user.id)
        refreshed = services.catalogs.get_by_id(catalog.id)
        assert refreshed.name == "Cotton Deluxe"
        assert refreshed.description is None
        assert refreshed.updated_by == admin_user.id

        last = services.audit.find_by_entity("catalog", catalog.id)[-1].to_dict()
        assert last["action"] == "update"
        assert last["changes"]["name"] == {"from": "Premium Cotton", "to": "Cotton Deluxe"}


class TestCatalogDelete:

    def test_sold_roll_still_blocks_delete(self, services, catalog, make_roll, admin_user):
        make_roll("R-1", status="sold")
        assert services.catalogs.get_roll_count(catalog.id) == 1
        assert services.catalogs.get_active_roll_count(catalog.id) == 0

        with pytest.raises(BusinessRuleError) as exc:
            services.catalogs.delete(catalog.id, admin_user.id)
        assert exc.value.code == "CATALOG_HAS_ROLLS"
        assert exc.value.metadata["rollCount"] == 1

    def test_soft_deleted_roll_still_blocks_delete(self, services, catalog, make_roll, admin_user):
        roll = make_roll("R-1")
        services.rolls.delete(roll.id, admin_user.id)
        assert services.catalogs.get_roll_count(catalog.id) == 1

        with pytest.raises(BusinessRuleError) as exc:
            services.catalogs.delete(catalog.id, admin_user.id)
        assert exc.value.code == "CATALOG_HAS_ROLLS"
        assert exc.value.metadata["rollCount"] == 1
        assert services.catalogs.get_by_id(catalog.id).id == catalog.id

    def test_delete_without_rolls(self, services, catalog, admin_user):
        services.catalogs.delete(catalog.id, admin_user.id)
        with pytest.raises(NotFoundError):
            services.catalogs.get_by_id(catalog.id)
        assert services.catalogs.get_all() == []


def test_filters_and_materials(services, catalog, admin_user):
    services.catalogs.create(
        {"code": "PLY-001", "name": "Polyester Blend", "material": "Polyester", "status": "draft"},
        admin_user.id,
    )
    assert [c.code for c in services.catalogs.get_all({"status": "draft"})] == ["PLY-001"]
    assert [c.code for c in services.catalogs.get_all({"search": "cotton"})] == ["CTN-001"]
    assert services.catalogs.get_materials() == ["Cotton", "Polyester"]
