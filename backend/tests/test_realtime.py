"""
Gerçek zamanlı katman testleri: oda katılımı, çevrimiçi durumu ve olay yayını
"""
from db.mongo import Collections
from core.security import create_access_token
from services.realtime import PresenceRegistry, RealtimeGateway, RealtimeNotifier, user_room


class FakeSocketServer:
    """socketio.AsyncServer'ın kullanılan kısmı"""

    def __init__(self):
        self.emitted = []
        self.rooms = {}
        self.sessions = {}

    async def emit(self, event, data=None, room=None):
        self.emitted.append((event, data, room))

    async def enter_room(self, sid, room):
        self.rooms.setdefault(sid, set()).add(room)

    async def leave_room(self, sid, room):
        self.rooms.get(sid, set()).discard(room)

    async def save_session(self, sid, session):
        self.sessions[sid] = session

    async def get_session(self, sid):
        return self.sessions.get(sid, {})


def _gateway(db, server):
    async def provider():
        return db
    return RealtimeGateway(server, PresenceRegistry(), db_provider=provider)


def test_presence_tracks_multiple_sockets():
    presence = PresenceRegistry()

    assert presence.add("s1", "u1") is True
    assert presence.add("s2", "u1") is False
    assert presence.remove("s1") == ("u1", False)
    assert presence.is_online("u1")
    assert presence.remove("s2") == ("u1", True)
    assert not presence.is_online("u1")


async def test_notifier_targets_user_room():
    server = FakeSocketServer()

    await RealtimeNotifier(server).emit_to_users(["a", "b", "a"], "new_message", {"x": 1})

    assert [e[2] for e in server.emitted] == [user_room("a"), user_room("b")]


async def test_invalid_token_is_refused(db):
    gateway = _gateway(db, FakeSocketServer())

    accepted = await gateway.connect("sid-1", {"QUERY_STRING": "token=bozuk"}, None)
    assert accepted is False


async def test_join_marks_online_and_disconnect_marks_offline(db, staff):
    server = FakeSocketServer()
    gateway = _gateway(db, server)
    token, _ = create_access_token(staff["id"])

    assert await gateway.connect("sid-1", {}, {"token": token}) is True
    await gateway.join_user("sid-1", staff["id"])

    assert user_room(staff["id"]) in server.rooms["sid-1"]
    user = await db[Collections.USERS].find_one({"id": staff["id"]})
    assert user["is_online"] is True
    status_events = [e for e in server.emitted if e[0] == "user_status_changed"]
    assert status_events[-1][1]["is_online"] is True

    await gateway.disconnect("sid-1")

    user = await db[Collections.USERS].find_one({"id": staff["id"]})
    assert user["is_online"] is False
    status_events = [e for e in server.emitted if e[0] == "user_status_changed"]
    assert status_events[-1][1]["is_online"] is False


async def test_cannot_join_another_users_room(db, staff, other_staff):
    server = FakeSocketServer()
    gateway = _gateway(db, server)
    token, _ = create_access_token(staff["id"])
    await gateway.connect("sid-1", {}, {"token": token})

    await gateway.join_user("sid-1", other_staff["id"])

    assert "sid-1" not in server.rooms
    assert server.emitted[-1][0] == "error"


async def test_typing_is_relayed_to_recipient(db, staff, other_staff):
    server = FakeSocketServer()
    gateway = _gateway(db, server)
    await gateway.connect("sid-1", {}, None)
    await gateway.join_user("sid-1", staff["id"])

    await gateway.relay_typing("sid-1", "typing_start", {"chat_id": "c1", "recipient_id": other_staff["id"]})

    event, data, room = server.emitted[-1]
    assert (event, room) == ("typing_start", user_room(other_staff["id"]))
    assert data["user_id"] == staff["id"]


async def test_switching_user_releases_previous_user(db, staff, other_staff):
    server = FakeSocketServer()
    gateway = _gateway(db, server)
    await gateway.connect("sid-1", {}, None)
    await gateway.join_user("sid-1", staff["id"])

    await gateway.join_user("sid-1", other_staff["id"])

    assert server.rooms["sid-1"] == {user_room(other_staff["id"])}
    assert not gateway.presence.is_online(staff["id"])
    user = await db[Collections.USERS].find_one({"id": staff["id"]})
    assert user["is_online"] is False
    offline = [e for e in server.emitted if e[0] == "user_status_changed" and not e[1]["is_online"]]
    assert [e[1]["user_id"] for e in offline] == [staff["id"]]
