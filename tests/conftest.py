from __future__ import annotations

import pytest

from tests.fakes import FakeLedger, FakeProjectSdk


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger(balance=1_000_000_000)


@pytest.fixture
def sdk() -> FakeProjectSdk:
    return FakeProjectSdk()
