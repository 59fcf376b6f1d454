import logging
from typing import Dict, List

from fastapi import WebSocket


logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(self):
        # Several sockets per user (one per open tab)
        self.active_connections: Dict[int, List[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, user_id: int):
        """Accepts a new user websocket connection and stores it mapped to the user_id."""
        await websocket.accept()

        self.active_connections.setdefault(user_id, []).append(websocket)
        logger.info("User %s connected (connections: %d)", user_id, len(self.active_connections[user_id]))

    def disconnect(self, websocket: WebSocket, user_id: int):
        """Removes a specific WebSocket connection when it disconnects."""
        connections = self.active_connections.get(user_id)
        if connections is None:
            return

        if websocket in connections:
            connections.remove(websocket)

        if not connections:
            del self.active_connections[user_id]
            logger.info("User %s fully disconnected", user_id)

    async def send_personal_message(self, msg_data: dict, receiver_id: int):
        """
        Sends a JSON payload to every socket of one user.
        Sockets that fail to accept the write are dropped.
        """
        if receiver_id not in self.active_connections:
            return

        dead_connections = []
        for connection in self.active_connections[receiver_id][:]:
            try:
                await connection.send_json(msg_data)
            except Exception as e:
                logger.warning("Dead connection detected for user %s: %s", receiver_id, e)
                dead_connections.append(connection)

        for dead_conn in dead_connections:
            self.disconnect(dead_conn, receiver_id)


manager = ConnectionManager()
