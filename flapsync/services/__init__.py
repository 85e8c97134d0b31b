"""Room relay services: the room registry and the per-connection protocol.

Nothing in here knows about Flask or Socket.IO; the socket handlers hand
each service a transport bound to the current connection.
"""
