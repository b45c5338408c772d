"""Relay: lifecycle controller for the stream-to-webhook relay."""

from __future__ import annotations

from webhooker.relay.controller import ControllerState, LifecycleController

__all__ = ["ControllerState", "LifecycleController"]
