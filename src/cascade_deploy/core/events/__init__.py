# src/cascade_deploy/core/events/__init__.py
"""Event Sink tipado do Cascade Deploy."""

from .sink import CascadeEvent, EventSink, EventType

__all__ = ["CascadeEvent", "EventSink", "EventType"]
