from relay.messages import CALL_ENDED, USER_JOINED
from relay.registry import ConnectionRegistry
from relay.rooms import RoomMembershipManager


def make_manager():
    registry = ConnectionRegistry()
    return RoomMembershipManager(registry), registry


def test_first_join_creates_room_and_notifies_nobody(connections):
    rooms, registry = make_manager()
    a = connections("a")

    envelopes = rooms.join("R", "A", a)

    assert envelopes == []
    assert rooms.members_of("R") == {"A"}
    assert "R" in rooms
    assert registry.lookup("A") is a


def test_second_join_notifies_existing_member_only(connections):
    rooms, _ = make_manager()
    rooms.join("R", "A", connections("a"))

    envelopes = rooms.join("R", "B", connections("b"))

    assert rooms.members_of("R") == {"A", "B"}
    assert [(e.target, e.event, e.data) for e in envelopes] == [("A", USER_JOINED, {"userId": "B"})]


def test_join_skips_members_without_connection(connections):
    rooms, registry = make_manager()
    a = connections("a")
    rooms.join("R", "A", a)
    registry.unregister(a)

    assert rooms.join("R", "B", connections("b")) == []
    assert rooms.members_of("R") == {"A", "B"}


def test_leave_notifies_remaining_members_with_call_ended(connections):
    rooms, _ = make_manager()
    rooms.join("R", "A", connections("a"))
    rooms.join("R", "B", connections("b"))
    rooms.join("R", "C", connections("c"))

    envelopes = rooms.leave("R", "A")

    assert sorted(e.target for e in envelopes) == ["B", "C"]
    assert all(e.event == CALL_ENDED and e.data is None for e in envelopes)
    assert rooms.members_of("R") == {"B", "C"}


def test_last_leave_discards_room_and_rejoin_starts_fresh(connections):
    rooms, _ = make_manager()
    a = connections("a")
    rooms.join("R", "A", a)

    assert rooms.leave("R", "A") == []
    assert rooms.members_of("R") == frozenset()
    assert "R" not in rooms
    assert len(rooms) == 0

    rooms.join("R", "A", a)
    assert rooms.members_of("R") == {"A"}


def test_leave_absent_room_or_non_member_is_noop(connections):
    rooms, _ = make_manager()
    assert rooms.leave("missing", "A") == []

    rooms.join("R", "A", connections("a"))
    assert rooms.leave("R", "B") == []
    assert rooms.members_of("R") == {"A"}


def test_member_can_be_in_several_rooms(connections):
    rooms, _ = make_manager()
    a = connections("a")
    rooms.join("R1", "A", a)
    rooms.join("R2", "A", a)
    rooms.join("R2", "B", connections("b"))

    assert sorted(rooms.rooms_of("A")) == ["R1", "R2"]
    assert rooms.rooms_of("B") == ["R2"]
    assert rooms.rooms_of("nobody") == []


def test_room_is_not_capped_at_two_members(connections):
    rooms, _ = make_manager()
    for name in ("A", "B", "C", "D"):
        rooms.join("group", name, connections(name))
    assert len(rooms.members_of("group")) == 4


def test_members_of_returns_snapshot(connections):
    rooms, _ = make_manager()
    rooms.join("R", "A", connections("a"))
    snapshot = rooms.members_of("R")
    rooms.join("R", "B", connections("b"))
    assert snapshot == {"A"}


def test_close_removes_room_and_returns_members(connections):
    rooms, _ = make_manager()
    rooms.join("R", "A", connections("a"))
    rooms.join("R", "B", connections("b"))

    assert rooms.close("R") == {"A", "B"}
    assert "R" not in rooms
    assert rooms.close("R") == frozenset()
