"""
MovieBox - Catalogue de films, series, personnes et utilisateurs.

Ce package gere un catalogue media persiste en base documentaire/relationnelle
avec maintien transactionnel des agregats (Serie -> Saisons -> Episodes),
des references croisees (casting, filmographie) et d'un cache en lecture.

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entites, ports, objets valeur, erreurs)
- services/ : Couche application (agregats, cascades, cache)
- adapters/ : Adaptateurs techniques (cache disque)
- infrastructure/ : Persistance SQLModel asynchrone
- web/ : Exposition HTTP FastAPI
"""

__version__ = "0.1.0"
