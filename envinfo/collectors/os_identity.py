"""
Fournisseurs d'identité du système d'exploitation

Chaîne de préférence ordonnée : le premier fournisseur qui retourne
un libellé non vide l'emporte.
- WMI (Win32_OperatingSystem.Caption, module wmi optionnel)
- /etc/os-release (PRETTY_NAME des distributions Unix)
- platform (chaîne de version générique du runtime, toujours disponible)
"""

import platform
from typing import Dict, Iterable, List, Optional, Tuple

from .base import clean_string


OS_RELEASE_PATHS = ('/etc/os-release', '/usr/lib/os-release')


def generic_os_version() -> str:
    """Chaîne de version OS générique fournie par le runtime"""
    return platform.platform()


class OsIdentityProvider:
    """
    Fournisseur d'identité OS

    identify() retourne (nom, version) ou lève une exception si
    l'information n'est pas disponible par ce moyen.
    """

    name = "base"

    def identify(self) -> Tuple[str, str]:
        raise NotImplementedError


class WmiOsIdentityProvider(OsIdentityProvider):
    """Identité OS via WMI (Windows, module wmi chargé dynamiquement)"""

    name = "wmi"

    def identify(self) -> Tuple[str, str]:
        import wmi

        c = wmi.WMI()
        for os_info in c.Win32_OperatingSystem():
            caption = clean_string(os_info.Caption)
            if caption:
                return caption, generic_os_version()
            break

        raise LookupError("Win32_OperatingSystem sans libellé")


class OsReleaseIdentityProvider(OsIdentityProvider):
    """Identité OS via le fichier os-release des distributions Unix"""

    name = "os_release"

    def __init__(self, paths: Iterable[str] = OS_RELEASE_PATHS):
        self.paths = tuple(paths)

    def _read_os_release(self) -> Dict[str, str]:
        for path in self.paths:
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    lines = f.readlines()
            except FileNotFoundError:
                continue

            os_info = {}
            for line in lines:
                if '=' in line:
                    key, value = line.strip().split('=', 1)
                    os_info[key] = value.strip('"\'')
            return os_info

        raise FileNotFoundError(f"Aucun fichier os-release parmi {', '.join(self.paths)}")

    def identify(self) -> Tuple[str, str]:
        os_info = self._read_os_release()

        caption = clean_string(os_info.get('PRETTY_NAME'))
        if not caption and 'NAME' in os_info and 'VERSION' in os_info:
            caption = clean_string(f"{os_info['NAME']} {os_info['VERSION']}")

        if not caption:
            raise LookupError("os-release sans PRETTY_NAME ni NAME/VERSION")
        return caption, generic_os_version()


class PlatformOsIdentityProvider(OsIdentityProvider):
    """Repli : la version générique sert de nom et de version"""

    name = "platform"

    def identify(self) -> Tuple[str, str]:
        version = generic_os_version()
        if not version:
            raise LookupError("Version OS générique vide")
        return version, version


PROVIDERS = {
    WmiOsIdentityProvider.name: WmiOsIdentityProvider,
    OsReleaseIdentityProvider.name: OsReleaseIdentityProvider,
    PlatformOsIdentityProvider.name: PlatformOsIdentityProvider,
}

DEFAULT_PROVIDER_ORDER = ('wmi', 'os_release', 'platform')


def build_os_identity_providers(names: Optional[Iterable[str]] = None) -> List[OsIdentityProvider]:
    """
    Construit la chaîne de fournisseurs dans l'ordre demandé

    Les noms inconnus sont ignorés ; le repli platform est toujours
    présent en fin de chaîne.

    Args:
        names: Noms des fournisseurs (ordre de préférence)

    Returns:
        list: Instances de fournisseurs
    """
    names = list(names) if names is not None else list(DEFAULT_PROVIDER_ORDER)
    providers = [PROVIDERS[name]() for name in names if name in PROVIDERS]

    if not any(isinstance(p, PlatformOsIdentityProvider) for p in providers):
        providers.append(PlatformOsIdentityProvider())
    return providers


def resolve_os_identity(providers: Iterable[OsIdentityProvider], logger, component=None) -> Tuple[str, str]:
    """
    Parcourt la chaîne et retourne la première identité obtenue

    Args:
        providers: Fournisseurs dans l'ordre de préférence
        logger: Logger de diagnostic (interface formatted_info)
        component: Composant émetteur des messages de diagnostic

    Returns:
        tuple: (nom, version)

    Raises:
        LookupError: Si aucun fournisseur n'a répondu
    """
    component = component or resolve_os_identity.__module__
    reasons = []

    for provider in providers:
        try:
            return provider.identify()
        except Exception as e:
            reasons.append(f"{provider.name}: {e}")
            logger.formatted_info(
                component,
                "Identité OS indisponible via %s (%s). Passage au fournisseur suivant.",
                provider.name,
                e
            )

    raise LookupError("; ".join(reasons) or "Aucun fournisseur d'identité OS")
