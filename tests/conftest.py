"""Shared fixtures for schedule-file based tests."""

import pytest

SCHEDULE_YAML = """
schedules:
  - id: oil-change
    organisationId: acme
    assetId: truck-7
    name: Engine oil and filter
    intervalType: monthly
    intervalValue: 1
    dayOfMonth: 15
    startDate: '2025-01-15'
    leadTimeDays: 7
    intervalMileage: 5000
    state:
      nextDueDate: '2025-02-15'
      lastTriggeredMileage: 10000

  - id: tire-rotation
    organisationId: acme
    assetId: truck-7
    name: Tire rotation
    intervalType: weekly
    intervalValue: 1
    dayOfWeek: 5
    startDate: '2025-01-15'
    leadTimeDays: 0

  - id: crane-cert
    organisationId: other-org
    assetId: crane-1
    name: Crane certification
    intervalType: annually
    monthOfYear: 2
    dayOfMonth: 29
    startDate: '2024-02-29'
    leadTimeDays: 30
    isActive: false

assets:
  - id: truck-7
    currentMileage: 14250
    asOf: '2025-01-20'
"""


@pytest.fixture
def schedule_file(tmp_path):
    """A schedule YAML file with two active schedules and one inactive."""
    path = tmp_path / "fleet.yaml"
    path.write_text(SCHEDULE_YAML)
    return path


@pytest.fixture
def ledger_path(tmp_path):
    return tmp_path / "cycles.sqlite"
