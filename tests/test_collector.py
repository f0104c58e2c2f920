"""Tests du cache d'instantané et du point d'entrée get_snapshot."""

import logging
import threading
import time
from unittest.mock import MagicMock

import envinfo
from envinfo.collectors.environment import EnvironmentCollector
from envinfo.collectors.os_identity import PlatformOsIdentityProvider
from envinfo.core.collector import EnvironmentInfoCollector, SnapshotCell, get_snapshot
from envinfo.core.config import CollectorConfig
from envinfo.core.logger import CollectorLogger
from envinfo.core.snapshot import EnvironmentSnapshot
from tests.conftest import FakePort, FakeResolver


class CountingCollector:
    """Collecteur d'étapes simulé qui compte ses exécutions."""

    def __init__(self, counter, delay=0.0):
        self.counter = counter
        self.delay = delay

    def collect(self):
        with self.counter['lock']:
            self.counter['runs'] += 1
        time.sleep(self.delay)
        return EnvironmentSnapshot(os_name="TestOS", process_id=str(self.counter['runs']))

    def get_collection_stats(self):
        return {'errors_count': 0, 'errors': []}


def counting_factory(delay=0.0):
    counter = {'runs': 0, 'lock': threading.Lock()}
    return counter, (lambda: CountingCollector(counter, delay))


class TestSnapshotCell:
    def test_empty_cell(self):
        assert SnapshotCell().get() is None

    def test_factory_runs_once(self):
        cell = SnapshotCell()
        factory = MagicMock(return_value=EnvironmentSnapshot(os_name="A"))

        first = cell.get_or_create(factory)
        second = cell.get_or_create(factory)

        assert first is second
        factory.assert_called_once_with()

    def test_reset(self):
        cell = SnapshotCell()
        cell.get_or_create(EnvironmentSnapshot)
        cell.reset()

        assert cell.get() is None


class TestEnvironmentInfoCollector:
    def test_sequential_calls_return_same_instance(self, diag_logger):
        counter, factory = counting_factory()
        collector = EnvironmentInfoCollector(logger=diag_logger, collector_factory=factory, cell=SnapshotCell())

        snapshots = [collector.get_snapshot() for _ in range(5)]

        assert all(s is snapshots[0] for s in snapshots)
        assert counter['runs'] == 1

    def test_concurrent_first_calls_publish_once(self, diag_logger):
        counter, factory = counting_factory(delay=0.05)
        collector = EnvironmentInfoCollector(logger=diag_logger, collector_factory=factory, cell=SnapshotCell())
        barrier = threading.Barrier(16)
        results = []
        results_lock = threading.Lock()

        def worker():
            barrier.wait()
            snapshot = collector.get_snapshot()
            with results_lock:
                results.append(snapshot)

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 16
        assert all(r is results[0] for r in results)
        assert counter['runs'] == 1

    def test_collectors_sharing_cell_agree(self, diag_logger):
        cell = SnapshotCell()
        _, first_factory = counting_factory()
        second_factory = MagicMock(side_effect=AssertionError("must not run"))

        first = EnvironmentInfoCollector(logger=diag_logger, collector_factory=first_factory, cell=cell)
        second = EnvironmentInfoCollector(logger=diag_logger, collector_factory=second_factory, cell=cell)

        assert first.get_snapshot() is second.get_snapshot()
        second_factory.assert_not_called()

    def test_default_cell_is_process_wide(self, diag_logger, fresh_shared_cell):
        _, factory = counting_factory()

        first = EnvironmentInfoCollector(logger=diag_logger, collector_factory=factory)
        second = EnvironmentInfoCollector(logger=diag_logger, collector_factory=factory)

        assert first.get_snapshot() is second.get_snapshot()
        assert fresh_shared_cell.get() is first.get_snapshot()

    def test_never_raises(self, diag_logger):
        factory = MagicMock(side_effect=RuntimeError("psutil unavailable"))
        collector = EnvironmentInfoCollector(logger=diag_logger, collector_factory=factory, cell=SnapshotCell())

        snapshot = collector.get_snapshot()

        assert snapshot == EnvironmentSnapshot()
        assert diag_logger.formatted_info.call_args.args[2].args == ("psutil unavailable",)

    def test_collection_stats_recorded(self, diag_logger):
        _, factory = counting_factory()
        collector = EnvironmentInfoCollector(logger=diag_logger, collector_factory=factory, cell=SnapshotCell())

        collector.get_snapshot()

        assert collector.last_collection_stats == {'errors_count': 0, 'errors': []}

    def test_provider_order_from_config(self, diag_logger, tmp_path):
        config = CollectorConfig(str(tmp_path / "missing.ini"))
        config.set('collector', 'os_identity_providers', 'platform')
        collector = EnvironmentInfoCollector(logger=diag_logger, config=config, cell=SnapshotCell())

        step_collector = collector._build_step_collector()

        assert [p.name for p in step_collector.os_identity_providers] == ['platform']


class TestModuleLevelGetSnapshot:
    def test_real_collection_is_cached(self, fresh_shared_cell):
        first = get_snapshot()
        second = envinfo.get_snapshot()

        assert first is second
        assert isinstance(first, EnvironmentSnapshot)
        assert first.runtime_version is not None
        assert first.process_id is not None


class SnapshotRequestingHandler(logging.Handler):
    """Handler qui joint l'instantané à chaque enregistrement."""

    def __init__(self, collector):
        super().__init__()
        self.collector = collector
        self.seen = []

    def emit(self, record):
        self.seen.append(self.collector.get_snapshot())


class TestReentrantCalls:
    def test_factory_calling_back_gets_empty_snapshot(self):
        cell = SnapshotCell()
        inner = []

        def factory():
            inner.append(cell.get_or_create(factory))
            return EnvironmentSnapshot(os_name="A")

        outer = cell.get_or_create(factory)

        assert outer.os_name == "A"
        assert inner == [EnvironmentSnapshot()]
        assert cell.get() is outer

    def test_log_handler_requesting_snapshot_does_not_block(self):
        logger = CollectorLogger(configure=False, name="EnvironmentInfo.reentrant")
        logger.logger.setLevel(logging.INFO)
        logger.logger.propagate = False

        def step_collector():
            return EnvironmentCollector(
                logger,
                port=FakePort(memory=OSError("GlobalMemoryStatusEx failed")),
                os_identity_providers=[PlatformOsIdentityProvider()],
                resolver=FakeResolver(["10.0.0.5"]),
            )

        collector = EnvironmentInfoCollector(logger=logger, collector_factory=step_collector, cell=SnapshotCell())
        handler = SnapshotRequestingHandler(collector)
        logger.logger.addHandler(handler)
        results = []
        try:
            worker = threading.Thread(target=lambda: results.append(collector.get_snapshot()), daemon=True)
            worker.start()
            worker.join(timeout=5)
        finally:
            logger.logger.removeHandler(handler)

        assert not worker.is_alive()
        assert results[0].process_id == "4242"
        assert results[0].total_physical_memory_bytes is None
        assert handler.seen
        assert all(s.to_dict() == {'extraData': {}} for s in handler.seen)
        # La valeur publiée reste celle du calcul complet
        assert collector.get_snapshot() is results[0]
