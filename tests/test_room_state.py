"""
Tests for Room State

Tests for the room description, its cached command and inventory views,
and concurrent mutation.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from weather_room import (
    EMPTY_COMMANDS,
    EMPTY_INVENTORY,
    InvalidArgument,
    MapData,
    RoomDescription,
)


# ----------------------------------------------------------------------------
# Setup
# ----------------------------------------------------------------------------

@pytest.fixture
def room():
    return RoomDescription()


# ----------------------------------------------------------------------------
# Test descriptive fields
# ----------------------------------------------------------------------------

def test_room_description_defaults(room):
    assert room.name == "weather"
    assert room.full_name == "A Weather Room"
    assert room.description.startswith("Welcome to the Weather Room.")


def test_setters_update_fields(room):
    room.name = "cellar"
    room.full_name = "The Storm Cellar"
    room.description = "It is damp."

    assert room.name == "cellar"
    assert room.full_name == "The Storm Cellar"
    assert room.description == "It is damp."


def test_update_data_ignores_missing_fields(room):
    room.update_data(MapData(full_name="Weather Station"))

    assert room.name == "weather"
    assert room.full_name == "Weather Station"
    assert room.description.startswith("Welcome to the Weather Room.")


def test_map_data_from_dict():
    data = MapData.from_dict(
        {"name": "wx", "fullName": "Weather", "description": "Cloudy"}
    )
    assert data.name == "wx"
    assert data.full_name == "Weather"
    assert data.description == "Cloudy"


# ----------------------------------------------------------------------------
# Test commands view
# ----------------------------------------------------------------------------

def test_get_commands_empty_is_empty_constant(room):
    commands = room.get_commands()

    assert commands is not None
    assert commands is EMPTY_COMMANDS
    assert len(commands) == 0


def test_get_commands_is_cached_until_mutation(room):
    room.add_command("/weatherLike", "What's the weather like")

    first = room.get_commands()
    second = room.get_commands()

    assert first is second
    assert dict(first) == {"/weatherLike": "What's the weather like"}


def test_add_command_rebuilds_view(room):
    room.add_command("/ping", "Ping")
    before = room.get_commands()

    room.add_command("/pong", "Pong")
    after = room.get_commands()

    assert after is not before
    assert dict(after) == {"/ping": "Ping", "/pong": "Pong"}


def test_add_command_replaces_description(room):
    room.add_command("/ping", "Ping")
    room.add_command("/ping", "Ping again")

    assert dict(room.get_commands()) == {"/ping": "Ping again"}


def test_add_command_without_description_raises(room):
    with pytest.raises(InvalidArgument, match="description is required"):
        room.add_command("/ping", None)

    assert room.get_commands() is EMPTY_COMMANDS


def test_invalid_argument_is_value_error():
    assert issubclass(InvalidArgument, ValueError)


def test_remove_command(room):
    room.add_command("/ping", "Ping")
    before = room.get_commands()

    room.remove_command("/ping")

    assert room.get_commands() is not before
    assert room.get_commands() is EMPTY_COMMANDS


def test_remove_missing_command_is_noop(room):
    room.add_command("/ping", "Ping")

    room.remove_command("/missing")

    assert dict(room.get_commands()) == {"/ping": "Ping"}


def test_commands_view_is_read_only(room):
    room.add_command("/ping", "Ping")

    with pytest.raises(TypeError):
        room.get_commands()["/pong"] = "Pong"


# ----------------------------------------------------------------------------
# Test inventory view
# ----------------------------------------------------------------------------

def test_get_inventory_empty_is_empty_constant(room):
    inventory = room.get_inventory()

    assert inventory is not None
    assert inventory is EMPTY_INVENTORY
    assert len(inventory) == 0


def test_get_inventory_is_cached_until_mutation(room):
    room.add_item("umbrella")

    assert room.get_inventory() is room.get_inventory()
    assert room.get_inventory() == ("umbrella",)


def test_add_item_rebuilds_view(room):
    room.add_item("umbrella")
    before = room.get_inventory()

    room.add_item("barometer")
    after = room.get_inventory()

    assert after is not before
    assert set(after) == {"umbrella", "barometer"}


def test_add_item_has_no_duplicates(room):
    room.add_item("umbrella")
    room.add_item("umbrella")

    assert room.get_inventory() == ("umbrella",)


def test_remove_item(room):
    room.add_item("umbrella")
    room.add_item("barometer")

    room.remove_item("umbrella")
    room.remove_item("not-here")

    assert room.get_inventory() == ("barometer",)


def test_to_dict(room):
    room.add_command("/ping", "Ping")
    room.add_item("umbrella")

    data = room.to_dict()

    assert data == {
        "name": "weather",
        "fullName": "A Weather Room",
        "description": room.description,
        "commands": {"/ping": "Ping"},
        "roomInventory": ["umbrella"],
    }


def test_str_lists_commands_and_items(room):
    room.add_command("/ping", "Ping")
    room.add_item("umbrella")

    text = str(room)

    assert "name=weather" in text
    assert "/ping" in text
    assert "umbrella" in text


# ----------------------------------------------------------------------------
# Test concurrent mutation
# ----------------------------------------------------------------------------

def test_concurrent_add_and_remove_items(room):
    """Items whose last operation was an add are exactly the ones left."""
    names = [f"item-{i}" for i in range(200)]

    def work(name):
        room.add_item(name)
        room.get_inventory()
        if int(name.split("-")[1]) % 3 == 0:
            room.remove_item(name)
        room.get_inventory()

    with ThreadPoolExecutor(max_workers=16) as executor:
        list(executor.map(work, names))

    expected = {n for n in names if int(n.split("-")[1]) % 3 != 0}
    assert set(room.get_inventory()) == expected
    assert len(room.get_inventory()) == len(expected)


def test_concurrent_add_commands(room):
    def work(i):
        room.add_command(f"/cmd{i}", f"Command {i}")
        return room.get_commands()

    with ThreadPoolExecutor(max_workers=16) as executor:
        views = list(executor.map(work, range(100)))

    # Every view seen by a writer already contains its own command
    for i, view in enumerate(views):
        assert view[f"/cmd{i}"] == f"Command {i}"
    assert len(room.get_commands()) == 100
