"""
Tests for connection bookkeeping and room membership.
"""

from unittest.mock import MagicMock


class TestJoinLeave:
    """join/leave are idempotent and scoped to one room."""

    def test_join_twice_keeps_single_membership(self, registry, connect):
        conn, _ = connect()

        assert registry.join(conn.id, "class-42") is True
        assert registry.join(conn.id, "class-42") is False

        members = registry.members("class-42")
        assert [c.id for c in members] == [conn.id]
        assert registry.rooms_of(conn.id) == {"class-42"}

    def test_leave_when_not_joined_is_noop(self, registry, connect):
        conn, _ = connect()
        registry.join(conn.id, "class-1")

        assert registry.leave(conn.id, "class-2") is False

        assert registry.rooms_of(conn.id) == {"class-1"}
        assert [c.id for c in registry.members("class-1")] == [conn.id]

    def test_member_of_several_rooms(self, registry, connect):
        conn, _ = connect()
        registry.join(conn.id, "a")
        registry.join(conn.id, "b")

        registry.leave(conn.id, "a")

        assert registry.rooms_of(conn.id) == {"b"}
        assert registry.members("a") == []

    def test_empty_room_entry_removed(self, registry, connect):
        conn, _ = connect()
        registry.join(conn.id, "a")
        assert registry.room_count == 1

        registry.leave(conn.id, "a")

        assert registry.room_count == 0

    def test_leave_clears_typing_state(self, registry, connect):
        conn, _ = connect()
        registry.join(conn.id, "a")
        conn.typing["a"] = "u1"

        registry.leave(conn.id, "a")

        assert conn.typing == {}


class TestDisconnect:
    """Disconnect removes a connection from every room at once."""

    def test_disconnect_removes_from_all_rooms(self, registry, connect):
        conn, _ = connect()
        other, _ = connect()
        for room in ("a", "b", "c"):
            registry.join(conn.id, room)
        registry.join(other.id, "a")

        rooms = registry.on_disconnect(conn.id)

        assert rooms == {"a", "b", "c"}
        assert not registry.is_connected(conn.id)
        assert [c.id for c in registry.members("a")] == [other.id]
        assert registry.members("b") == []
        assert registry.members("c") == []

    def test_operations_after_disconnect_are_noops(self, registry, connect):
        conn, _ = connect()
        registry.on_disconnect(conn.id)

        assert registry.join(conn.id, "a") is False
        assert registry.leave(conn.id, "a") is False
        assert registry.on_disconnect(conn.id) == frozenset()
        assert registry.members("a") == []

    def test_unknown_connection_id(self, registry):
        assert registry.get("nope") is None
        assert registry.rooms_of("nope") == frozenset()
        assert registry.on_disconnect("nope") == frozenset()


class TestConnect:
    def test_ids_are_unique(self, registry):
        ids = {registry.on_connect(MagicMock()).id for _ in range(500)}

        assert len(ids) == 500
        assert registry.connection_count == 500

    def test_user_id_recorded(self, registry):
        conn = registry.on_connect(MagicMock(), user_id="u7")

        assert registry.get(conn.id).user_id == "u7"
        assert conn.rooms == set()

    def test_members_is_a_snapshot(self, registry, connect):
        a, _ = connect()
        b, _ = connect()
        registry.join(a.id, "r")
        registry.join(b.id, "r")

        snapshot = registry.members("r")
        for conn in snapshot:
            registry.on_disconnect(conn.id)

        assert len(snapshot) == 2
        assert registry.members("r") == []
