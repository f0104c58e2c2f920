"""
Collecteur de l'instantané d'environnement

Ce module collecte les informations machine / processus destinées
aux rapports de diagnostic :
- Identité et version du système
- Mémoire physique et mémoire du processus
- Machine, adresses IP, processeurs
- Processus, thread, architecture, version du runtime

Chaque information est collectée isolément : l'échec d'une étape est
journalisé et laisse seulement le champ correspondant absent.
"""

import os
import sys
import shlex
import socket
import platform
import ipaddress
import threading
import subprocess
from typing import List, Optional

import psutil

from .base import BaseCollector
from .os_identity import build_os_identity_providers, resolve_os_identity
from .platform import select_system_info_port
from .platform.probe import is_64bit_process
from ..core.snapshot import Architecture, EnvironmentSnapshot


EXECUTION_CONTEXT_KEY = 'AppDomainName'


class HostResolver:
    """Résolution du nom d'hôte local vers ses adresses IP"""

    def host_name(self) -> str:
        return socket.gethostname()

    def addresses(self, host_name: str) -> List[str]:
        """
        Retourne la liste d'adresses de l'hôte, dans l'ordre du résolveur

        Args:
            host_name: Nom d'hôte à résoudre

        Returns:
            list: Adresses (IPv4 et IPv6), sans doublons
        """
        addresses = []
        for _family, _type, _proto, _canonname, sockaddr in socket.getaddrinfo(host_name, None):
            address = sockaddr[0]
            if address not in addresses:
                addresses.append(address)
        return addresses


def _is_ipv4(address: str) -> bool:
    try:
        return ipaddress.ip_address(address).version == 4
    except ValueError:
        return False


def _non_negative(value, label: str) -> Optional[int]:
    if value is None:
        return None
    value = int(value)
    if value < 0:
        raise ValueError(f"{label} négatif: {value}")
    return value


class EnvironmentCollector(BaseCollector):
    """
    Collecteur de l'instantané d'environnement

    Ne dépend que de l'interface SystemInfoPort pour les appels natifs ;
    l'implémentation est choisie selon la famille de système.
    """

    def __init__(self, logger, port=None, os_identity_providers=None, resolver=None):
        """
        Initialise le collecteur

        Args:
            logger: Logger de diagnostic (interface formatted_info)
            port: Implémentation de SystemInfoPort (sélection automatique si None)
            os_identity_providers: Chaîne de fournisseurs d'identité OS
            resolver: Résolveur d'adresses de l'hôte
        """
        super().__init__(logger)
        self.port = port if port is not None else select_system_info_port()
        self.os_identity_providers = (
            os_identity_providers if os_identity_providers is not None
            else build_os_identity_providers()
        )
        self.resolver = resolver or HostResolver()

    def collect(self) -> EnvironmentSnapshot:
        """
        Collecte toutes les informations d'environnement

        Returns:
            EnvironmentSnapshot: Instantané, éventuellement incomplet
        """
        self._start_collection()
        fields = {}
        extra_data = {}

        identity = self._unwrap(self._run_step("l'identité du système", self._get_os_identity))
        if identity:
            fields['os_name'], fields['os_version'] = identity

        memory = self._unwrap(self._run_step("la mémoire physique", self._get_physical_memory))
        if memory:
            fields['total_physical_memory_bytes'], fields['available_physical_memory_bytes'] = memory

        steps = (
            ('processor_count', "le nombre de processeurs", self._get_processor_count),
            ('machine_name', "le nom de la machine", self._get_machine_name),
            ('ip_address', "l'adresse IP", self._get_ip_address),
            ('process_memory_bytes', "la mémoire du processus", self._get_process_memory),
            ('command_line', "la ligne de commande", self._get_command_line),
            ('process_id', "l'identifiant du processus", self.port.process_id),
            ('process_name', "le nom du processus", self.port.process_name),
            ('thread_id', "l'identifiant du thread", self.port.thread_id),
            ('architecture', "l'architecture CPU", self._get_architecture),
            ('runtime_version', "la version du runtime", self._get_runtime_version),
        )
        for field_name, facet, func in steps:
            fields[field_name] = self._unwrap(self._run_step(facet, func))

        context_name = self._unwrap(
            self._run_step("le nom du contexte d'exécution", self._get_execution_context_name)
        )
        if context_name:
            extra_data[EXECUTION_CONTEXT_KEY] = context_name

        fields['thread_name'] = self._unwrap(
            self._run_step("le nom du thread courant", self._get_thread_name)
        )

        self.last_collection_duration = self._end_collection()
        return EnvironmentSnapshot(extra_data=extra_data, **fields)

    def _get_os_identity(self):
        return resolve_os_identity(self.os_identity_providers, self.logger, self.__class__)

    def _get_physical_memory(self):
        status = self.port.memory_status()
        if status is None:
            return None
        total, available = status
        return _non_negative(total, "total"), _non_negative(available, "disponible")

    def _get_processor_count(self):
        return _non_negative(psutil.cpu_count(logical=True), "nombre de processeurs")

    def _get_machine_name(self):
        return socket.gethostname() or None

    def _get_ip_address(self):
        addresses = self.resolver.addresses(self.resolver.host_name())
        # Une liste IPv4 vide laisse le champ absent
        return ", ".join(a for a in addresses if _is_ipv4(a)) or None

    def _get_process_memory(self):
        process = psutil.Process()
        private = getattr(process.memory_info(), 'private', None)  # Windows
        if private is None:
            private = process.memory_full_info().uss
        return _non_negative(private, "mémoire privée")

    def _get_command_line(self):
        arguments = psutil.Process().cmdline()
        if not arguments:
            arguments = [sys.executable] + sys.argv
        if sys.platform == "win32":
            return subprocess.list2cmdline(arguments)
        return shlex.join(arguments)

    def _get_architecture(self):
        # Un processus 64 bits ne tourne que sur un système 64 bits
        if is_64bit_process():
            return Architecture.X64
        if self.port.is_wow64_process():
            return Architecture.X64
        return Architecture.X86

    def _get_runtime_version(self):
        return platform.python_version()

    def _get_execution_context_name(self):
        program = sys.argv[0] if sys.argv and sys.argv[0] else sys.executable
        return os.path.basename(program) or None

    def _get_thread_name(self):
        return threading.current_thread().name
