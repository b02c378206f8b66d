"""
Chat Gateway.

WebSocket relay for the beej-chat-protocol: every chat-join and
chat-message a client sends is broadcast to all connected clients, and a
chat-leave is announced when a client goes away.
"""
