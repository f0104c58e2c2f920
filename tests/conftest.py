"""Fixtures partagées : port système simulé, résolveur simulé, cache vierge."""

from unittest.mock import MagicMock

import pytest

from envinfo.collectors.platform.base import SystemInfoPort
from envinfo.core.collector import EnvironmentInfoCollector


class FakePort(SystemInfoPort):
    """Port système simulé, enregistre les appels reçus."""

    family = "fake"

    def __init__(self, memory=(8 * 1024 ** 3, 2 * 1024 ** 3), pid="4242",
                 name="fake-process", tid="7", wow64=False):
        self.memory = memory
        self.pid = pid
        self.name = name
        self.tid = tid
        self.wow64 = wow64
        self.calls = []

    def memory_status(self):
        self.calls.append("memory_status")
        if isinstance(self.memory, Exception):
            raise self.memory
        return self.memory

    def process_id(self):
        self.calls.append("process_id")
        return self.pid

    def process_name(self):
        self.calls.append("process_name")
        return self.name

    def thread_id(self):
        self.calls.append("thread_id")
        return self.tid

    def is_wow64_process(self):
        self.calls.append("is_wow64_process")
        if isinstance(self.wow64, Exception):
            raise self.wow64
        return self.wow64


class FakeResolver:
    def __init__(self, addresses, host="test-host"):
        self._addresses = addresses
        self.host = host

    def host_name(self):
        return self.host

    def addresses(self, host_name):
        if isinstance(self._addresses, Exception):
            raise self._addresses
        return list(self._addresses)


@pytest.fixture
def fake_port():
    return FakePort()


@pytest.fixture
def diag_logger():
    """Logger simulé exposant formatted_info / debug / info."""
    return MagicMock()


@pytest.fixture
def fresh_shared_cell():
    """Vide la cellule partagée du processus avant et après le test."""
    EnvironmentInfoCollector._shared_cell.reset()
    yield EnvironmentInfoCollector._shared_cell
    EnvironmentInfoCollector._shared_cell.reset()
