# tests/__init__.py
"""
Expose common test utilities so tests can import directly:
    from tests import FakeListingService, make_state
"""

from .utils import FakeListingService, FakeProbe, RecordingNotifier, make_state

__all__ = ["FakeListingService", "FakeProbe", "RecordingNotifier", "make_state"]
