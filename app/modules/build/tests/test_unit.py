import io
from datetime import datetime, timezone

import pytest

from app import db
from app.modules.auth.context import AuthContext
from app.modules.build.models import BuildRecord
from app.modules.build.services import BuildService
from app.modules.conftest import create_user, login, logout
from app.modules.game.exceptions import GameAccessDenied, GameNotFound
from app.modules.game.models import GameRecord, Platform
from app.modules.game.services import GameService
from app.modules.library.models import LibraryEntry
from app.modules.upload.units import UploadState, UploadUnit
from arcade.commands.games_purge import games_purge
from arcade.commands.uploads_reconcile import uploads_reconcile
from core.storage import StorageService, storage_service


@pytest.fixture(scope="function")
def uploads_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOADS_DIR", str(tmp_path / "uploads"))
    return tmp_path / "uploads"


@pytest.fixture(scope="function")
def developer(test_client, clean_database):
    return AuthContext.from_user(create_user("builder@example.com", display_name="Night Owl Studio"))


@pytest.fixture(scope="function")
def player(developer):
    return AuthContext.from_user(create_user("player@example.com", display_name="Player One"))


def completed_unit(file_id, platform=Platform.WINDOWS, file_name="night.exe", size=2048):
    return UploadUnit(
        id=f"unit-{file_id}",
        file_name=file_name,
        file_size=size,
        platform=platform,
        version="2.0.1",
        state=UploadState.COMPLETED,
        progress=100,
        storage_file_id=file_id,
        completed_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )


def stored_game(developer, is_free=True, price=0.0, content=b"night build"):
    game = GameService().create_game(
        developer,
        title="Night Shift",
        short_description="Keep the lights on until dawn.",
        genre="Horror",
        platforms=["Windows"],
        is_free=is_free,
        price=price,
        visibility="public",
    )
    file_id = "f" * 32
    storage_service.save_stream(io.BytesIO(content), StorageService.build_file_path(file_id, "night.exe"))
    BuildService().link_completed_units(game.id, developer.user_id, [completed_unit(file_id, size=len(content))])
    return game, file_id


def test_link_completed_units_creates_records(developer):
    game = GameService().create_game(
        developer, title="Night Shift", short_description="-", genre="Horror", platforms=["Windows"], is_free=True
    )

    builds = BuildService().link_completed_units(
        game.id,
        developer.user_id,
        [completed_unit("1" * 32), completed_unit("2" * 32, Platform.LINUX, "night.zip")],
    )

    assert [build.platform for build in builds] == [Platform.WINDOWS, Platform.LINUX]
    assert all(build.version == "2.0.1" for build in builds)
    assert sorted(build.storage_file_id for build in game.builds) == ["1" * 32, "2" * 32]
    assert builds[0].download_url.endswith("?id=" + "1" * 32)
    assert builds[0].storage_key == f"builds/{'1' * 32}/night.exe"


def test_link_to_missing_game_writes_nothing(developer):
    with pytest.raises(GameNotFound):
        BuildService().link_completed_units(404, developer.user_id, [completed_unit("3" * 32)])

    assert BuildRecord.query.count() == 0


def test_link_to_someone_elses_game_is_refused(developer, player):
    game = GameService().create_game(
        developer, title="Night Shift", short_description="-", genre="Horror", platforms=["Windows"], is_free=True
    )

    with pytest.raises(GameAccessDenied):
        BuildService().link_completed_units(game.id, player.user_id, [completed_unit("4" * 32)])

    assert BuildRecord.query.count() == 0


def test_build_needs_at_least_one_byte():
    with pytest.raises(ValueError):
        BuildRecord(file_name="empty.zip", file_size=0, platform=Platform.WEB, storage_file_id="5" * 32)


def test_storage_file_ids_round_trip():
    key = StorageService.build_file_path("abc123", "game.apk")

    assert key == "builds/abc123/game.apk"
    assert StorageService.file_id_from_key(key) == "abc123"
    assert StorageService.file_id_from_key("temp/1/game.apk") is None


def test_local_storage_lists_and_deletes(uploads_dir):
    moved = []
    key = StorageService.build_file_path("abc123", "game.apk")

    storage_service.save_stream(io.BytesIO(b"z" * 10), key, progress=moved.append)

    assert sum(moved) == 10
    assert storage_service.exists(key)
    assert [listed for listed, _ in storage_service.list_objects("builds")] == [key]
    assert storage_service.delete_file(key) is True
    assert storage_service.delete_file(key) is False
    assert storage_service.list_objects("builds") == []


def test_download_free_build_adds_to_library(test_client, developer, player, uploads_dir):
    game, file_id = stored_game(developer)
    login(test_client, "player@example.com", "test1234")

    response = test_client.get(f"/builds/download?id={file_id}")

    assert response.status_code == 200
    assert response.data == b"night build"
    assert LibraryEntry.query.filter_by(user_id=player.user_id, game_id=game.id).count() == 1
    db.session.refresh(game)
    assert game.download_count == 1

    library = test_client.get("/library").get_json()
    assert library["count"] == 1
    assert library["items"][0]["game"]["title"] == "Night Shift"
    logout(test_client)


def test_download_paid_build_requires_purchase(test_client, developer, player, uploads_dir):
    game, file_id = stored_game(developer, is_free=False, price=299.0)

    login(test_client, "player@example.com", "test1234")
    response = test_client.get(f"/builds/download?id={file_id}")
    assert response.status_code == 402
    logout(test_client)

    login(test_client, "builder@example.com", "test1234")
    response = test_client.get(f"/builds/download?id={file_id}")
    assert response.status_code == 200
    logout(test_client)


def test_download_errors(test_client, developer, player, uploads_dir):
    _, file_id = stored_game(developer)

    assert test_client.get(f"/builds/download?id={file_id}").status_code == 401

    login(test_client, "player@example.com", "test1234")
    assert test_client.get("/builds/download?id=unknown").status_code == 404
    storage_service.delete_file(StorageService.build_file_path(file_id, "night.exe"))
    assert test_client.get(f"/builds/download?id={file_id}").status_code == 404
    logout(test_client)


def test_list_builds_endpoint(test_client, developer, uploads_dir):
    game, file_id = stored_game(developer)

    response = test_client.get(f"/games/{game.id}/builds")

    assert response.status_code == 200
    assert [build["file_id"] for build in response.get_json()["builds"]] == [file_id]


def test_uploads_reconcile_only_removes_old_orphans(test_app, developer, uploads_dir):
    _, linked_id = stored_game(developer)
    linked_key = StorageService.build_file_path(linked_id, "night.exe")
    orphan_key = StorageService.build_file_path("0" * 32, "lost.zip")
    storage_service.save_stream(io.BytesIO(b"lost"), orphan_key)
    runner = test_app.test_cli_runner()

    result = runner.invoke(uploads_reconcile, ["--min-age-hours", "1"])
    assert "No orphaned builds found." in result.output

    result = runner.invoke(uploads_reconcile, ["--min-age-hours", "0", "--dry-run"])
    assert f"would delete {orphan_key}" in result.output
    assert storage_service.exists(orphan_key)

    result = runner.invoke(uploads_reconcile, ["--min-age-hours", "0"])
    assert result.exit_code == 0
    assert not storage_service.exists(orphan_key)
    assert storage_service.exists(linked_key)


def test_games_purge(test_app, developer, player, uploads_dir):
    game, file_id = stored_game(developer)
    GameService().register_download(game, player)

    result = test_app.test_cli_runner().invoke(games_purge, ["--yes"])

    assert result.exit_code == 0
    assert "games=1, builds=1, library_entries=1, stored_files=1" in result.output
    assert GameRecord.query.count() == 0
    assert not storage_service.exists(StorageService.build_file_path(file_id, "night.exe"))
