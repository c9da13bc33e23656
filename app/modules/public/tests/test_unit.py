import importlib

import dotenv

from app.modules.auth.context import AuthContext
from app.modules.conftest import create_user
from app.modules.game.services import GameService
from arcade.commands.db_seed import db_seed
from core.managers import config_manager


def test_index_shows_stats_and_latest_games(test_client, clean_database):
    developer = AuthContext.from_user(create_user("front@example.com"))
    service = GameService()
    base = {"short_description": "-", "genre": "Arcade", "platforms": ["Web"]}
    for index in range(7):
        is_free = index % 2 == 0
        service.create_game(developer, title=f"Game {index}", is_free=is_free, price=0 if is_free else 99, **base)
    service.create_game(developer, title="Hidden", visibility="private", is_free=True, **base)

    response = test_client.get("/")

    assert response.status_code == 200
    body = response.get_json()
    assert body["stats"] == {"published_games": 7, "free_games": 4, "total_downloads": 0}
    assert len(body["latest"]) == 6
    assert "Hidden" not in [game["title"] for game in body["latest"]]


def test_index_with_empty_catalog(test_client, clean_database):
    response = test_client.get("/")

    assert response.status_code == 200
    assert response.get_json()["latest"] == []


def test_seeded_storefront(test_app, test_client, clean_database, tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOADS_DIR", str(tmp_path / "uploads"))

    result = test_app.test_cli_runner().invoke(db_seed)
    assert result.exit_code == 0, result.output
    assert "AuthSeeder done." in result.output
    assert "GameSeeder done." in result.output

    body = test_client.get("/").get_json()
    assert body["stats"] == {"published_games": 4, "free_games": 2, "total_downloads": 7448}
    assert "Hollow Signal" not in [game["title"] for game in body["latest"]]


def test_config_reads_dotenv_before_settings_are_built(monkeypatch):
    def load_from_file(*args, **kwargs):
        monkeypatch.setenv("SECRET_KEY", "from-dotenv")
        monkeypatch.setenv("UPLOAD_WORKERS", "7")
        return True

    monkeypatch.setattr(dotenv, "load_dotenv", load_from_file)
    try:
        reloaded = importlib.reload(config_manager)
        assert reloaded.Config.SECRET_KEY == "from-dotenv"
        assert reloaded.Config.UPLOAD_WORKERS == 7
    finally:
        monkeypatch.undo()
        importlib.reload(config_manager)
