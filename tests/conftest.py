"""
Shared fixtures.
"""

import copy

import pytest

from payloads import SAMPLE_PAYLOAD


@pytest.fixture
def sample_payload():
    """A full contributions page; see tests/payloads.py."""
    return copy.deepcopy(SAMPLE_PAYLOAD)
