"""
Tests unitaires pour les commandes CLI principales.

Tests couvrant:
- version: affichage de la version
- info: affichage de la configuration
- init-db: creation des tables sur la base configuree
- clear-cache: vidage du cache des lectures
"""

import asyncio
from typing import Iterator

import pytest
from dependency_injector import providers
from typer.testing import CliRunner

from moviebox import main as cli
from moviebox.adapters.cache import CatalogCache
from moviebox.config import Settings

runner = CliRunner()


@pytest.fixture
def cli_settings(test_settings: Settings) -> Iterator[Settings]:
    """Installe les settings de test dans le container du module CLI."""
    cli.container.config.override(providers.Object(test_settings))
    cli.container.reset_singletons()
    yield test_settings
    cli.container.config.reset_override()
    cli.container.reset_singletons()


class TestVersionCommand:
    def test_prints_version(self) -> None:
        result = runner.invoke(cli.app, ["version"])

        assert result.exit_code == 0
        assert "MovieBox v0.1.0" in result.stdout


class TestInfoCommand:
    def test_shows_configuration(self, cli_settings: Settings) -> None:
        result = runner.invoke(cli.app, ["info"])

        assert result.exit_code == 0
        assert cli_settings.database_url in result.stdout
        assert "TTL 600s" in result.stdout
        assert "3 tentatives" in result.stdout


class TestInitDbCommand:
    def test_creates_database_file(self, cli_settings: Settings, tmp_path) -> None:
        result = runner.invoke(cli.app, ["init-db"])

        assert result.exit_code == 0
        assert (tmp_path / "test.db").exists()


class TestClearCacheCommand:
    def test_removes_every_entry(self, cli_settings: Settings) -> None:
        """clear-cache vide le cache configure et affiche le nombre d'entrees."""
        cache = CatalogCache(cache_dir=str(cli_settings.cache_dir))
        asyncio.run(cache.set("user:u1", "alice", ttl=3600))
        asyncio.run(cache.set("users:list:1:10", [1], ttl=3600))
        cache.close()

        result = runner.invoke(cli.app, ["clear-cache"])

        assert result.exit_code == 0
        assert "2 entrée(s) supprimée(s)" in result.stdout
        reopened = CatalogCache(cache_dir=str(cli_settings.cache_dir))
        try:
            assert asyncio.run(reopened.get("user:u1")) is None
        finally:
            reopened.close()

    def test_empty_cache(self, cli_settings: Settings) -> None:
        result = runner.invoke(cli.app, ["clear-cache"])

        assert result.exit_code == 0
        assert "0 entrée(s)" in result.stdout
