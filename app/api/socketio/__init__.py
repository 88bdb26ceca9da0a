# app/api/socketio/__init__.py

"""
Socket.IO namespaces for real-time features

Active namespaces:
- /game: In-game move relay

To add a new namespace:
1. Create a new file: <feature>_namespace.py
2. Inherit from AuthNamespace (handles authentication automatically)
3. Implement optional callbacks:
   - handle_connect(self, sid, environ, user) - called after successful auth
   - handle_disconnect(self, sid) - called before disconnection
4. Register it at the bottom of the module with sio.register_namespace(YourNamespace('/your-path'))
"""

from infrastructure.socketio_manager import sio, manager
from .game_namespace import GameNamespace


__all__ = ['sio', 'manager', 'GameNamespace']
