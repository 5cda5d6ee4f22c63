"""Background tasks."""

from .poller import Poller, get_poll_delay

__all__ = ['Poller', 'get_poll_delay']
