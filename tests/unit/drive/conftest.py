"""Fixtures for drive tests."""

import pytest
from fake_drive import DRIVE_ID, FakeDrive

from graph_drive.drive.address import DriveScope


@pytest.fixture
def fake_drive() -> FakeDrive:
    return FakeDrive()


@pytest.fixture
def scope() -> DriveScope:
    return DriveScope.for_drive(DRIVE_ID)
