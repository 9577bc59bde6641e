"""
Configuration de l'application via pydantic-settings.

La configuration est chargée depuis les variables d'environnement avec le préfixe MOVIEBOX_,
et peut optionnellement être fournie via un fichier .env.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Trouver le fichier .env à la racine du projet (parent de moviebox/)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Paramètres de l'application avec support des variables d'environnement.

    Tous les paramètres peuvent être surchargés via des variables d'environnement
    avec le préfixe MOVIEBOX_.
    Exemple : MOVIEBOX_DATABASE_URL=sqlite+aiosqlite:////var/lib/moviebox.db

    Les chemins sont automatiquement étendus (~ -> répertoire home).
    """

    model_config = SettingsConfigDict(
        env_prefix="MOVIEBOX_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Base de données (URL SQLAlchemy asynchrone)
    database_url: str = Field(default="sqlite+aiosqlite:///moviebox.db")
    database_echo: bool = Field(default=False)

    # Cache en lecture (diskcache)
    cache_dir: Path = Field(default=Path(".cache/moviebox"))
    cache_ttl_seconds: int = Field(default=600, ge=1)

    # Relance des operations de stockage sur erreur transitoire
    retry_max_attempts: int = Field(default=3, ge=1)
    retry_max_wait_seconds: float = Field(default=2.0, ge=0)

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de rétention)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path("logs/moviebox.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("cache_dir", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Étend ~ vers le répertoire home dans les chemins."""
        return Path(v).expanduser()
