"""
Constantes metier du catalogue.

Poids de popularite appliques par les cascades de creation, bornes des notes
et limites par defaut des listes.
"""

# Popularite ajoutee au parent quand un enfant est cree
EPISODE_CREATION_WEIGHT = 5  # episode cree -> saison et serie
SEASON_CREATION_WEIGHT = 10  # saison creee -> serie

# Popularite ajoutee a chaque consultation d'un episode
EPISODE_VIEW_POPULARITY = 1

# Bornes inclusives des notes utilisateur
RATING_MIN = 0.0
RATING_MAX = 5.0

# Listes
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
RELATED_PEOPLE_LIMIT = 10
DEFAULT_TRENDING_LIMIT = 10
