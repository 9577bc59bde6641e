"""
Couche domaine (core).

Contient les entités métier, ports (interfaces abstraites), objets valeur et erreurs.
Cette couche n'a AUCUNE dépendance vers l'infrastructure (adapters, frameworks, BDD).

Sous-packages :
- entities/ : Entités métier (Movie, Person, TvShow, Season, Episode, User, Review)
- ports/ : Interfaces abstraites (repositories, unité de travail, cache, notifications)
- value_objects/ : Objets valeur (identifiants, pagination, énumérations)
"""
