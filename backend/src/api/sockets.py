"""
Socket.IO Olay Kayıtları
İstemci olaylarını RealtimeGateway'e bağlar
"""
import socketio

from services.realtime import RealtimeGateway


def register_socket_handlers(server: socketio.AsyncServer, gateway: RealtimeGateway) -> None:
    """Socket olay handler'larını sunucuya ekle"""

    @server.event
    async def connect(sid, environ, auth=None):
        return await gateway.connect(sid, environ, auth)

    @server.event
    async def disconnect(sid, *args):
        await gateway.disconnect(sid)

    @server.on("join_user")
    async def join_user(sid, user_id):
        await gateway.join_user(sid, user_id)

    @server.on("typing_start")
    async def typing_start(sid, data):
        await gateway.relay_typing(sid, "typing_start", data)

    @server.on("typing_stop")
    async def typing_stop(sid, data):
        await gateway.relay_typing(sid, "typing_stop", data)

    @server.on("heartbeat")
    async def heartbeat(sid, user_id=None):
        await gateway.heartbeat(sid, user_id)
