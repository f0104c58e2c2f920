"""
Modèle de données de l'instantané d'environnement

Ce module définit l'objet unique produit par le collecteur :
- EnvironmentSnapshot (immuable, tous les champs optionnels)
- Architecture (x86 / x64)
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


class Architecture(str, Enum):
    """Architecture du processus / système d'exploitation"""

    X86 = "x86"
    X64 = "x64"


# Nom d'attribut Python -> nom de champ du rapport de diagnostic
CONTRACT_FIELDS = (
    ('os_name', 'osName'),
    ('os_version', 'osVersion'),
    ('total_physical_memory_bytes', 'totalPhysicalMemoryBytes'),
    ('available_physical_memory_bytes', 'availablePhysicalMemoryBytes'),
    ('processor_count', 'processorCount'),
    ('machine_name', 'machineName'),
    ('ip_address', 'ipAddress'),
    ('process_memory_bytes', 'processMemoryBytes'),
    ('command_line', 'commandLine'),
    ('process_id', 'processId'),
    ('process_name', 'processName'),
    ('thread_id', 'threadId'),
    ('thread_name', 'threadName'),
    ('architecture', 'architecture'),
    ('runtime_version', 'runtimeVersion'),
)


def _freeze(data: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return MappingProxyType(dict(data or {}))


@dataclass(frozen=True)
class EnvironmentSnapshot:
    """
    Instantané des informations machine / processus

    Chaque champ est indépendamment optionnel : None signifie que
    l'information n'a pas pu être collectée. L'objet est immuable
    une fois construit.
    """

    os_name: Optional[str] = None
    os_version: Optional[str] = None
    total_physical_memory_bytes: Optional[int] = None
    available_physical_memory_bytes: Optional[int] = None
    processor_count: Optional[int] = None
    machine_name: Optional[str] = None
    ip_address: Optional[str] = None
    process_memory_bytes: Optional[int] = None
    command_line: Optional[str] = None
    process_id: Optional[str] = None
    process_name: Optional[str] = None
    thread_id: Optional[str] = None
    thread_name: Optional[str] = None
    architecture: Optional[Architecture] = None
    runtime_version: Optional[str] = None
    extra_data: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # Figer extra_data même si l'appelant passe un dict mutable
        object.__setattr__(self, 'extra_data', _freeze(self.extra_data))

    def __hash__(self):
        # mappingproxy n'est pas hachable
        values = tuple(getattr(self, attribute) for attribute, _ in CONTRACT_FIELDS)
        return hash((values, tuple(sorted(self.extra_data.items()))))

    def to_dict(self) -> Dict[str, Any]:
        """
        Convertit l'instantané au format du rapport de diagnostic

        Les champs absents sont omis ; extraData est toujours présent.

        Returns:
            dict: Champs nommés selon le contrat du rapport
        """
        payload = {}
        for attribute, name in CONTRACT_FIELDS:
            value = getattr(self, attribute)
            if value is None:
                continue
            if isinstance(value, Architecture):
                value = value.value
            payload[name] = value

        payload['extraData'] = dict(self.extra_data)
        return payload

    def missing_fields(self):
        """Retourne la liste des champs non collectés"""
        return [name for attribute, name in CONTRACT_FIELDS if getattr(self, attribute) is None]
