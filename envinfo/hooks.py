"""
Branchement des gestionnaires d'exceptions non gérées

Ce module relaie vers une fonction de rapport fournie par l'appelant :
- Les exceptions non gérées du thread principal (sys.excepthook)
- Les exceptions non gérées des threads (threading.excepthook)
- Les exceptions de tâches asyncio jamais récupérées

Chaque rapport embarque l'instantané d'environnement du processus.
"""

import sys
import threading
import traceback
from typing import Any, Callable, Dict, Optional

from .core.collector import get_snapshot
from .core.logger import get_logger


Report = Dict[str, Any]
ReportCallback = Callable[[Report], None]

logger = get_logger()

# Hooks précédents, restaurés à la désinscription
_previous_excepthook = None
_previous_threading_excepthook = None
_loop_handlers = {}


def build_error_report(exc_type, exc_value, exc_traceback, submission_method: str,
                       snapshot_provider=None) -> Report:
    """
    Construit le rapport d'erreur transmis à la fonction de rapport

    Args:
        exc_type: Type de l'exception
        exc_value: Exception
        exc_traceback: Traceback associée
        submission_method: Origine du rapport (ex: "sys.excepthook")
        snapshot_provider: Source de l'instantané (get_snapshot par défaut)

    Returns:
        dict: Rapport d'erreur
    """
    snapshot_provider = snapshot_provider or get_snapshot
    return {
        'type': getattr(exc_type, '__qualname__', str(exc_type)),
        'message': str(exc_value),
        'traceback': ''.join(traceback.format_exception(exc_type, exc_value, exc_traceback)),
        'submissionMethod': submission_method,
        'unhandled': True,
        'environment': snapshot_provider().to_dict(),
    }


def _submit(report_callback: ReportCallback, exc_type, exc_value, exc_traceback, submission_method: str):
    try:
        report_callback(build_error_report(exc_type, exc_value, exc_traceback, submission_method))
    except Exception:
        logger.exception(f"Erreur lors de l'envoi du rapport d'exception ({submission_method})")


def register_unhandled_exception_handler(report_callback: ReportCallback):
    """
    Relaie les exceptions non gérées (processus et threads) vers report_callback

    Les hooks existants sont chaînés. Un nouvel appel remplace la fonction
    de rapport sans empiler les hooks.
    """
    global _previous_excepthook, _previous_threading_excepthook

    if _previous_excepthook is None:
        _previous_excepthook = sys.excepthook
    if _previous_threading_excepthook is None:
        _previous_threading_excepthook = threading.excepthook

    previous_excepthook = _previous_excepthook
    previous_threading_excepthook = _previous_threading_excepthook

    def excepthook(exc_type, exc_value, exc_traceback):
        _submit(report_callback, exc_type, exc_value, exc_traceback, 'sys.excepthook')
        previous_excepthook(exc_type, exc_value, exc_traceback)

    def threading_excepthook(args):
        # SystemExit dans un thread n'est pas une erreur
        if not issubclass(args.exc_type, SystemExit):
            _submit(report_callback, args.exc_type, args.exc_value, args.exc_traceback,
                    'threading.excepthook')
        previous_threading_excepthook(args)

    sys.excepthook = excepthook
    threading.excepthook = threading_excepthook


def unregister_unhandled_exception_handler():
    """Restaure les hooks d'exception d'origine"""
    global _previous_excepthook, _previous_threading_excepthook

    if _previous_excepthook is not None:
        sys.excepthook = _previous_excepthook
        _previous_excepthook = None
    if _previous_threading_excepthook is not None:
        threading.excepthook = _previous_threading_excepthook
        _previous_threading_excepthook = None


def register_loop_exception_handler(loop, report_callback: ReportCallback):
    """
    Relaie les exceptions asyncio non récupérées d'une boucle vers report_callback

    Args:
        loop: Boucle d'événements asyncio
        report_callback: Fonction de rapport
    """
    if loop not in _loop_handlers:
        _loop_handlers[loop] = loop.get_exception_handler()
    previous_handler = _loop_handlers[loop]

    def handler(event_loop, context):
        exception = context.get('exception')
        if exception is not None:
            _submit(report_callback, type(exception), exception, exception.__traceback__,
                    'asyncio.exception_handler')

        if previous_handler is not None:
            previous_handler(event_loop, context)
        else:
            event_loop.default_exception_handler(context)

    loop.set_exception_handler(handler)


def unregister_loop_exception_handler(loop):
    """Restaure le gestionnaire d'exceptions d'origine d'une boucle"""
    if loop not in _loop_handlers:
        return
    loop.set_exception_handler(_loop_handlers.pop(loop))


def install(report_callback: ReportCallback, loop: Optional[Any] = None):
    """
    Branche tous les gestionnaires d'exceptions

    Args:
        report_callback: Fonction de rapport
        loop: Boucle asyncio à surveiller (optionnelle)
    """
    register_unhandled_exception_handler(report_callback)
    if loop is not None:
        register_loop_exception_handler(loop, report_callback)


def uninstall(loop: Optional[Any] = None):
    """Débranche tous les gestionnaires d'exceptions"""
    unregister_unhandled_exception_handler()
    if loop is not None:
        unregister_loop_exception_handler(loop)
