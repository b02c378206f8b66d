"""
Chat Gateway Components.

- admission/: Handshake admission (ProtocolGate)
- connection/: Session registry
- core/: Constants, errors, logging context
- endpoints/: WebSocket endpoint classes
- events/: Message types and dispatch
- metrics/: Counters
"""
