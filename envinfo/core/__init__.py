"""
Module Core - Composants principaux du collecteur d'environnement

Ce module contient les fonctionnalités de base :
- Configuration
- Logging
- Modèle de l'instantané
- Collecte et cache
"""
