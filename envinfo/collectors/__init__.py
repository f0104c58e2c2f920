"""
Package des collecteurs de données d'environnement

Ce package contient :
- Collecteur de base (classe abstraite, résultat d'étape)
- Collecteur de l'instantané d'environnement
- Fournisseurs d'identité OS
- Accès système spécifiques par plateforme
"""
