"""
Point d'entrée du collecteur d'environnement

Affiche l'instantané d'environnement du processus courant :
- Un champ par ligne ("nom : valeur")
- Ou au format JSON du rapport de diagnostic
"""

import sys
import json
import argparse

from envinfo import __version__
from envinfo.core.config import CollectorConfig, create_default_config
from envinfo.core.logger import CollectorLogger
from envinfo.core.collector import EnvironmentInfoCollector


def format_snapshot(snapshot) -> str:
    """
    Formate l'instantané en texte, un champ par ligne

    Args:
        snapshot: EnvironmentSnapshot

    Returns:
        str: Texte formaté
    """
    lines = []
    for name, value in snapshot.to_dict().items():
        if name == 'extraData':
            for key, extra_value in value.items():
                lines.append(f"{key} : {extra_value}")
            continue
        lines.append(f"{name} : {value}")

    for name in snapshot.missing_fields():
        lines.append(f"{name} : (non disponible)")
    return "\n".join(lines)


def main(argv=None):
    """
    Fonction principale avec gestion des arguments en ligne de commande
    """
    parser = argparse.ArgumentParser(
        description="Collecteur d'instantané d'environnement",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        help='Chemin vers le fichier de configuration'
    )

    parser.add_argument(
        '--create-config',
        action='store_true',
        help='Crée un fichier de configuration par défaut'
    )

    parser.add_argument(
        '--validate-config',
        action='store_true',
        help='Valide la configuration actuelle'
    )

    parser.add_argument(
        '--json',
        action='store_true',
        help='Affiche l\'instantané au format JSON'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        help='Fichier de sortie pour l\'instantané (JSON)'
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Niveau de log (remplace la configuration)'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    args = parser.parse_args(argv)

    if args.create_config:
        if not args.config:
            print("❌ --create-config nécessite --config", file=sys.stderr)
            return 1
        try:
            create_default_config(args.config)
        except OSError as e:
            print(f"❌ Erreur création configuration: {e}", file=sys.stderr)
            return 1
        print(f"✅ Configuration par défaut créée: {args.config}")
        return 0

    config = CollectorConfig(args.config)
    for error in config.load_errors:
        print(f"⚠️  {error}", file=sys.stderr)

    if args.validate_config:
        errors = config.validate()
        for error in errors:
            print(f"Erreur de configuration: {error}", file=sys.stderr)
        print("✅ Configuration valide" if not errors else "❌ Configuration invalide")
        return 0 if not errors else 1

    if args.log_level:
        config.set('logging', 'log_level', args.log_level)

    logger = CollectorLogger(config)
    collector = EnvironmentInfoCollector(logger=logger, config=config)
    snapshot = collector.get_snapshot()

    if args.output:
        try:
            with open(args.output, 'w', encoding='utf-8') as f:
                json.dump(snapshot.to_dict(), f, indent=2, ensure_ascii=False)
        except OSError as e:
            print(f"❌ Erreur écriture {args.output}: {e}", file=sys.stderr)
            return 1
        print(f"✅ Instantané sauvegardé dans: {args.output}")
        return 0

    if args.json:
        print(json.dumps(snapshot.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(format_snapshot(snapshot))
    return 0


if __name__ == '__main__':
    sys.exit(main())
