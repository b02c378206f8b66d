"""Handshake admission control."""

from chat_gateway.components.admission.gate import AdmissionResult, ProtocolGate

__all__ = ["AdmissionResult", "ProtocolGate"]
