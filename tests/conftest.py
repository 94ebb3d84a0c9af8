#!/usr/bin/env python3
"""Shared fixtures."""

import copy
from typing import Any

import pytest

from helpers import PETSTORE, PETSTORE_URL, RecordingUpstream


@pytest.fixture
def petstore() -> dict[str, Any]:
    return copy.deepcopy(PETSTORE)


@pytest.fixture
def upstream(petstore) -> RecordingUpstream:
    return RecordingUpstream({PETSTORE_URL: petstore})
