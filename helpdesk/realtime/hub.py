from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from django.apps import apps

from helpdesk.realtime.broadcaster import EventBroadcaster
from helpdesk.realtime.rooms import RoomRouter
from helpdesk.realtime.socketio import create_server
from helpdesk.realtime.socketio import register_handlers
from helpdesk.tickets.store import TicketStore


@dataclass
class RealtimeHub:
    """One Socket.IO server with the router and broadcaster bound to it."""

    server: Any
    store: TicketStore
    router: RoomRouter
    broadcaster: EventBroadcaster


def build_hub(server: Any | None = None, store: TicketStore | None = None) -> RealtimeHub:
    server = server if server is not None else create_server()
    store = store if store is not None else TicketStore()
    router = RoomRouter(server, store)
    broadcaster = EventBroadcaster(server, store)
    register_handlers(server, router, broadcaster)
    return RealtimeHub(
        server=server,
        store=store,
        router=router,
        broadcaster=broadcaster,
    )


def get_hub() -> RealtimeHub:
    return apps.get_app_config("realtime").hub
