"""Test utilities for brochure sites::

    from brochure.testing import TestClient
"""

from brochure.testing.client import TestClient

__all__ = ["TestClient"]
