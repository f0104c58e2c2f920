"""Tests du branchement des gestionnaires d'exceptions non gérées."""

import asyncio
import contextlib
import sys
import threading
from unittest.mock import MagicMock

import pytest

from envinfo import hooks
from envinfo.core.snapshot import EnvironmentSnapshot


@pytest.fixture(autouse=True)
def fixed_snapshot(monkeypatch):
    monkeypatch.setattr(hooks, 'get_snapshot', lambda: EnvironmentSnapshot(os_name="TestOS"))


@contextlib.contextmanager
def isolated_hooks():
    """Remplace les hooks globaux dans le corps du test et les restaure à la sortie."""
    saved = sys.excepthook, threading.excepthook
    previous_sys, previous_threading = MagicMock(), MagicMock()
    sys.excepthook, threading.excepthook = previous_sys, previous_threading
    try:
        yield previous_sys, previous_threading
    finally:
        hooks.unregister_unhandled_exception_handler()
        sys.excepthook, threading.excepthook = saved


def raise_and_capture(exc):
    try:
        raise exc
    except type(exc) as e:
        return type(e), e, e.__traceback__


class TestBuildErrorReport:
    def test_report_fields(self):
        exc_type, exc, tb = raise_and_capture(ValueError("boom"))

        report = hooks.build_error_report(exc_type, exc, tb, 'manual')

        assert report['type'] == 'ValueError'
        assert report['message'] == 'boom'
        assert 'ValueError: boom' in report['traceback']
        assert report['submissionMethod'] == 'manual'
        assert report['unhandled'] is True
        assert report['environment'] == {'osName': 'TestOS', 'extraData': {}}


class TestUnhandledExceptionHandler:
    def test_forwards_and_chains_sys_excepthook(self):
        reports = []
        with isolated_hooks() as (previous_sys, _):
            hooks.register_unhandled_exception_handler(reports.append)
            sys.excepthook(*raise_and_capture(KeyError("missing")))

        assert reports[0]['type'] == 'KeyError'
        assert reports[0]['submissionMethod'] == 'sys.excepthook'
        previous_sys.assert_called_once()

    def test_forwards_thread_exceptions(self):
        reports = []
        exc_type, exc, tb = raise_and_capture(RuntimeError("worker failed"))
        args = threading.ExceptHookArgs([exc_type, exc, tb, threading.current_thread()])

        with isolated_hooks() as (_, previous_threading):
            hooks.register_unhandled_exception_handler(reports.append)
            threading.excepthook(args)

        assert [r['message'] for r in reports] == ["worker failed"]
        assert reports[0]['submissionMethod'] == 'threading.excepthook'
        previous_threading.assert_called_once_with(args)

    def test_thread_system_exit_is_not_reported(self):
        reports = []
        exc_type, exc, tb = raise_and_capture(SystemExit(0))
        args = threading.ExceptHookArgs([exc_type, exc, tb, None])

        with isolated_hooks() as (_, previous_threading):
            hooks.register_unhandled_exception_handler(reports.append)
            threading.excepthook(args)

        assert reports == []
        previous_threading.assert_called_once_with(args)

    def test_callback_error_does_not_break_chain(self):
        with isolated_hooks() as (previous_sys, _):
            hooks.register_unhandled_exception_handler(MagicMock(side_effect=ConnectionError("offline")))
            sys.excepthook(*raise_and_capture(ValueError("boom")))

        previous_sys.assert_called_once()

    def test_register_twice_does_not_stack(self):
        first, second = [], []
        with isolated_hooks() as (previous_sys, _):
            hooks.register_unhandled_exception_handler(first.append)
            hooks.register_unhandled_exception_handler(second.append)
            sys.excepthook(*raise_and_capture(ValueError("boom")))

        assert first == []
        assert len(second) == 1
        previous_sys.assert_called_once()

    def test_unregister_restores_hooks(self):
        with isolated_hooks() as (previous_sys, previous_threading):
            hooks.register_unhandled_exception_handler(lambda report: None)
            hooks.unregister_unhandled_exception_handler()

            assert sys.excepthook is previous_sys
            assert threading.excepthook is previous_threading


class TestLoopExceptionHandler:
    def test_forwards_unretrieved_task_exceptions(self):
        loop = asyncio.new_event_loop()
        previous = MagicMock()
        loop.set_exception_handler(previous)
        reports = []
        try:
            hooks.register_loop_exception_handler(loop, reports.append)

            loop.call_exception_handler({
                'message': 'Task exception was never retrieved',
                'exception': RuntimeError("lost"),
            })

            assert reports[0]['message'] == "lost"
            assert reports[0]['submissionMethod'] == 'asyncio.exception_handler'
            previous.assert_called_once()

            hooks.unregister_loop_exception_handler(loop)
            assert loop.get_exception_handler() is previous
        finally:
            loop.close()

    def test_context_without_exception_is_not_reported(self):
        loop = asyncio.new_event_loop()
        loop.set_exception_handler(MagicMock())
        reports = []
        try:
            with isolated_hooks():
                hooks.install(reports.append, loop=loop)
                loop.call_exception_handler({'message': 'slow callback'})
                hooks.uninstall(loop=loop)

            assert reports == []
        finally:
            loop.close()
