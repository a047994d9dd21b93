"""
Tests d'intégration pour cbc-lite.

Ces tests utilisent de vrais services (PostgreSQL, Redis) sur des ports exotiques
pour éviter les conflits avec les services de développement. Ils sont ignorés
si les services ne répondent pas.

Usage:
    pytest -m integration
"""
