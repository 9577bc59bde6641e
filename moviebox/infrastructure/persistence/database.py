"""
Configuration de la base de donnees asynchrone pour MovieBox.

Ce module fournit :
- Engine SQLAlchemy asynchrone (aiosqlite par defaut)
- Session factory produisant des AsyncSession SQLModel
- Fonction d'initialisation des tables

La base de donnees est configuree via MOVIEBOX_DATABASE_URL
(defaut: sqlite+aiosqlite:///moviebox.db).
"""

from pathlib import Path

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession


def create_database_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Cree l'engine asynchrone.

    Cree le repertoire parent si l'URL designe un fichier SQLite. Sous SQLite,
    chaque transaction prend le verrou d'ecriture des son ouverture
    (BEGIN IMMEDIATE) : une unite qui lit puis ecrit ne peut pas etre
    entrelacee avec une autre.

    Args:
        database_url: URL SQLAlchemy asynchrone
        echo: Journalise les requetes SQL

    Returns:
        Engine asynchrone
    """
    url = make_url(database_url)
    is_sqlite = url.get_backend_name() == "sqlite"
    if is_sqlite and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_async_engine(database_url, echo=echo)
    if is_sqlite:
        _begin_immediate_transactions(engine)
    return engine


def _begin_immediate_transactions(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        # Le driver n'emet plus son propre BEGIN differe
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(connection):
        connection.exec_driver_sql("BEGIN IMMEDIATE")


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Fabrique de sessions SQLModel asynchrones.

    expire_on_commit=False : les entites converties restent lisibles apres
    commit sans rechargement implicite (interdit en asynchrone).
    """
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """
    Initialise la base de donnees en creant toutes les tables.

    Cette fonction importe les modeles pour enregistrer leurs metadonnees
    dans SQLModel.metadata, puis cree les tables et index (dont les index
    uniques des numeros de saison/episode) s'ils n'existent pas deja.
    """
    # L'import est fait ici pour eviter les imports circulaires
    from moviebox.infrastructure.persistence import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
