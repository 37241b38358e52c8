"""This subpackage provides subscription adapters for Tango devices."""

__all__ = ["change_event_adapter"]


from .change_events import change_event_adapter
