"""
Point d'entrée CLI de MovieBox.

Initialise le container DI, configure le logging et fournit les commandes CLI.
"""

import asyncio
from typing import Annotated

import typer
from loguru import logger

from . import __version__
from .config import Settings
from .container import Container
from .infrastructure.persistence.database import init_db
from .logging_config import configure_logging_from_settings

app = typer.Typer(
    name="moviebox",
    help="Catalogue de films, series et utilisateurs",
)
container = Container()

# Etat global pour les options de verbosite
state = {"verbose": 0, "quiet": False}


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Augmenter la verbosite (-v, -vv, -vvv)"
        ),
    ] = 0,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Mode silencieux (erreurs uniquement)"),
    ] = False,
) -> None:
    """MovieBox - Catalogue media."""
    if quiet:
        state["quiet"] = True
    else:
        state["verbose"] = verbose


def get_config() -> Settings:
    """Récupère les paramètres de l'application depuis le container DI."""
    return container.config()


async def _create_tables() -> None:
    engine = container.engine()
    try:
        await init_db(engine)
    finally:
        await engine.dispose()


@app.command(name="init-db")
def init_database() -> None:
    """Cree les tables du catalogue si necessaire."""
    asyncio.run(_create_tables())
    typer.echo(f"Base initialisée : {get_config().database_url}")


async def _clear_cache() -> int:
    cache = container.cache()
    try:
        return await cache.clear()
    finally:
        cache.close()


@app.command(name="clear-cache")
def clear_cache() -> None:
    """Vide le cache des lectures (entites et listes)."""
    removed = asyncio.run(_clear_cache())
    logger.info("Cache vide", removed=removed, cache_dir=str(get_config().cache_dir))
    typer.echo(f"Cache vidé : {removed} entrée(s) supprimée(s)")


@app.command()
def info() -> None:
    """Affiche la configuration actuelle."""
    config = get_config()
    logger.info("Configuration MovieBox")
    typer.echo(f"Base de données : {config.database_url}")
    typer.echo(f"Cache : {config.cache_dir} (TTL {config.cache_ttl_seconds}s)")
    typer.echo(
        f"Relances stockage : {config.retry_max_attempts} tentatives, "
        f"attente max {config.retry_max_wait_seconds}s"
    )
    typer.echo(f"Niveau de log : {config.log_level}")


@app.command()
def version() -> None:
    """Affiche les informations de version."""
    typer.echo(f"MovieBox v{__version__}")


@app.command()
def serve(
    host: Annotated[str, typer.Option(help="Adresse d'écoute")] = "0.0.0.0",
    port: Annotated[int, typer.Option(help="Port d'écoute")] = 8000,
    reload: Annotated[bool, typer.Option(help="Rechargement automatique")] = False,
) -> None:
    """Lance le serveur web MovieBox."""
    import uvicorn

    typer.echo(f"Démarrage du serveur sur {host}:{port}")
    uvicorn.run("moviebox.web.app:app", host=host, port=port, reload=reload)


def main() -> None:
    """Point d'entrée de l'application."""
    # Charge la configuration et configure le logging
    configure_logging_from_settings(container.config())

    logger.info("Démarrage de MovieBox", version=__version__)

    # Lance la CLI
    app()


if __name__ == "__main__":
    main()
