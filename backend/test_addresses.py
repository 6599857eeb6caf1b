"""Test saved address management."""
import pytest

from app.errors import AddressNotFound
from app.services.addresses import AddressService

USER = "user-1"


def test_save_custom_addresses(db):
    AddressService.save_address(db, USER, "Gym", "123 Fitness Way, Houston, TX", "custom")
    AddressService.save_address(db, USER, "Mom's House", "9 Elm St, Katy, TX", "custom")

    assert len(AddressService.get_custom_addresses(db, USER)) == 2


def test_only_one_home_address(db):
    AddressService.save_address(db, USER, "Home", "1 Old Rd, Houston, TX", "home")
    AddressService.save_address(db, USER, "Home", "2 New Rd, Houston, TX", "home")

    addresses = AddressService.list_addresses(db, USER)
    assert len(addresses) == 1
    assert addresses[0].full_address == "2 New Rd, Houston, TX"
    assert addresses[0].is_default is True


def test_work_replaces_work_but_not_home(db):
    AddressService.save_address(db, USER, "Home", "1 Old Rd, Houston, TX", "home")
    AddressService.save_address(db, USER, "Work", "10 Office Pkwy, Houston, TX", "work")
    AddressService.save_address(db, USER, "Work", "20 Tower Blvd, Houston, TX", "work")

    assert AddressService.get_home_address(db, USER).full_address == "1 Old Rd, Houston, TX"
    work = AddressService.get_work_address(db, USER)
    assert work.full_address == "20 Tower Blvd, Houston, TX"
    assert work.is_default is False


def test_list_orders_home_work_custom(db):
    AddressService.save_address(db, USER, "Gym", "123 Fitness Way", "custom")
    AddressService.save_address(db, USER, "Work", "10 Office Pkwy", "work")
    AddressService.save_address(db, USER, "Home", "1 Old Rd", "home")

    assert [a.address_type for a in AddressService.list_addresses(db, USER)] == ["home", "work", "custom"]


def test_invalid_type(db):
    with pytest.raises(ValueError):
        AddressService.save_address(db, USER, "Cabin", "1 Lake Rd", "vacation")


def test_addresses_are_per_user(db):
    address = AddressService.save_address(db, USER, "Home", "1 Old Rd", "home")

    assert AddressService.list_addresses(db, "someone-else") == []
    with pytest.raises(AddressNotFound):
        AddressService.get_address(db, "someone-else", address.id)


def test_update_and_delete(db):
    address = AddressService.save_address(db, USER, "Gym", "123 Fitness Way", "custom")

    updated = AddressService.update_address(db, USER, address.id, "New Gym", "456 Muscle Ave, Houston, TX")
    assert updated.label == "New Gym"
    assert updated.address_type == "custom"

    AddressService.delete_address(db, USER, address.id)
    with pytest.raises(AddressNotFound):
        AddressService.delete_address(db, USER, address.id)


def test_format_for_display(db):
    named = AddressService.save_address(db, USER, "Store", "5000 Westheimer Rd, Houston, TX", "custom", "The Galleria")
    unnamed = AddressService.save_address(db, USER, "Gym", "123 Fitness Way, Houston, TX", "custom")
    bare = AddressService.save_address(db, USER, "Cabin", "Somewhere", "custom")

    assert AddressService.format_for_display(named) == "The Galleria"
    assert AddressService.format_for_display(unnamed) == "123 Fitness Way"
    assert AddressService.format_for_display(bare) == "Cabin"
