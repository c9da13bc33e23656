import io
import threading

import pytest

from app import db
from app.modules.auth.context import AuthContext, AuthenticationRequired
from app.modules.build.models import BuildRecord
from app.modules.build.services import BuildService
from app.modules.conftest import ManualExecutor, ScriptedTransport, create_user, login, logout
from app.modules.game.models import GameRecord, GameStatus, Genre, Platform
from app.modules.upload.exceptions import FinalizeIncomplete, TransferCancelled, ValidationRejected
from app.modules.upload.services import UploadTrackerRegistry
from app.modules.upload.tracker import UploadTracker
from app.modules.upload.transport import StorageTransport
from app.modules.upload.units import UploadSource, UploadState
from core.storage import StorageService

MIB = 1024 * 1024
APK_TYPE = "application/vnd.android.package-archive"


@pytest.fixture(scope="function")
def developer(test_client, clean_database):
    user = create_user("uploader@example.com")
    return AuthContext.from_user(user)


@pytest.fixture(scope="function")
def game(developer):
    record = GameRecord(
        title="Crypt Ledger",
        developer_id=developer.user_id,
        developer_name=developer.display_name,
        short_description="A dungeon accountant RPG.",
        genre=Genre.RPG,
        status=GameStatus.DRAFT,
    )
    record.set_pricing(True)
    record.set_platforms([Platform.WINDOWS, Platform.ANDROID])
    db.session.add(record)
    db.session.commit()
    return record


def apk(size=10 * MIB, name="crypt_ledger.apk"):
    return UploadSource(file_name=name, file_size=size, content_type=APK_TYPE)


def windows_zip(size=20 * MIB, name="crypt_ledger_win.zip"):
    return UploadSource(file_name=name, file_size=size, content_type="application/zip")


def make_tracker(auth, transport=None):
    executor = ManualExecutor()
    tracker = UploadTracker(auth, transport or ScriptedTransport(), executor=executor, max_bytes=500 * MIB)
    return tracker, executor


def record_events(tracker):
    events = []
    tracker.subscribe(events.append)
    return events


def test_oversized_file_is_rejected_before_uploading():
    tracker, executor = make_tracker(AuthContext(user_id=1))
    events = record_events(tracker)

    with pytest.raises(ValidationRejected):
        tracker.start_upload(windows_zip(size=600 * MIB), "Windows")

    assert [event.state for event in events] == [UploadState.VALIDATING, UploadState.REJECTED]
    assert tracker.units() == []
    assert executor.pending == []


@pytest.mark.parametrize(
    "source, platform, version",
    [
        (UploadSource(file_name="notes.txt", file_size=MIB, content_type="text/plain"), "Windows", "1.0.0"),
        (UploadSource(file_name="empty.zip", file_size=0, content_type="application/zip"), "Windows", "1.0.0"),
        (UploadSource(file_name="", file_size=MIB, content_type="application/zip"), "Windows", "1.0.0"),
        (UploadSource(file_name="game.zip", file_size=MIB, content_type="application/zip"), "Dreamcast", "1.0.0"),
        (UploadSource(file_name="game.zip", file_size=MIB, content_type="application/zip"), "Windows", "1.0"),
    ],
)
def test_invalid_files_never_enter_the_pipeline(source, platform, version):
    tracker, executor = make_tracker(AuthContext(user_id=1))

    with pytest.raises(ValidationRejected):
        tracker.start_upload(source, platform, version)

    assert tracker.units() == []
    assert executor.pending == []


def test_generic_binary_type_is_accepted_by_extension():
    tracker, executor = make_tracker(AuthContext(user_id=1))

    unit_id = tracker.start_upload(
        UploadSource(file_name="setup.exe", file_size=MIB, content_type="application/octet-stream"), "windows"
    )

    unit = tracker.get_unit(unit_id)
    assert unit.state == UploadState.UPLOADING
    assert unit.platform == Platform.WINDOWS
    assert len(executor.pending) == 1


def test_anonymous_users_cannot_upload():
    tracker, _ = make_tracker(AuthContext.anonymous())

    with pytest.raises(AuthenticationRequired):
        tracker.start_upload(apk(), "Android")


def test_progress_is_capped_until_the_transfer_completes():
    tracker, executor = make_tracker(AuthContext(user_id=1))
    events = record_events(tracker)

    unit_id = tracker.start_upload(apk(), "Android")
    executor.run_all()

    assert [event.progress for event in events] == [0, 0, 25, 50, 75, 99, 100]
    assert [event.state for event in events][-1] == UploadState.COMPLETED
    assert all(event.unit_id == unit_id for event in events)


def test_android_build_completes_and_links_one_record(developer, game):
    tracker, executor = make_tracker(developer)
    events = record_events(tracker)

    unit_id = tracker.start_upload(apk(), "Android", "1.2.0")
    executor.run_all()

    states = [event.state for event in events]
    assert states[:2] == [UploadState.VALIDATING, UploadState.UPLOADING]
    assert states[-1] == UploadState.COMPLETED
    assert set(states) == {UploadState.VALIDATING, UploadState.UPLOADING, UploadState.COMPLETED}

    unit = tracker.get_unit(unit_id)
    assert unit.progress == 100
    assert unit.download_url.endswith(unit.storage_file_id)

    builds = tracker.finalize(game.id, BuildService())

    assert len(builds) == 1
    stored = BuildRecord.query.filter_by(game_id=game.id).all()
    assert len(stored) == 1
    assert stored[0].platform == Platform.ANDROID
    assert stored[0].file_size == 10485760
    assert stored[0].version == "1.2.0"
    assert stored[0].storage_file_id == unit.storage_file_id
    assert tracker.units() == []


def test_cancelling_one_upload_leaves_the_other_untouched(developer, game):
    transport = ScriptedTransport()
    tracker, executor = make_tracker(developer, transport)
    events = record_events(tracker)

    windows_id = tracker.start_upload(windows_zip(), "Windows")
    android_id = tracker.start_upload(apk(), "Android")

    def interleave(step):
        if step == 2:
            executor.run_next()
            tracker.remove_upload(windows_id)

    transport.hooks["crypt_ledger_win.zip"] = interleave
    executor.run_all()

    assert tracker.get_unit(windows_id) is None
    android = tracker.get_unit(android_id)
    assert android.state == UploadState.COMPLETED
    assert android.progress == 100

    windows_states = [event.state for event in events if event.unit_id == windows_id]
    assert UploadState.COMPLETED not in windows_states
    assert UploadState.FAILED not in windows_states
    assert len(transport.stored) == 1

    builds = tracker.finalize(game.id, BuildService())
    assert [build.platform for build in builds] == [Platform.ANDROID]


def test_completion_after_removal_is_ignored(developer, game):
    tracker, executor = make_tracker(developer, ScriptedTransport(honour_cancel=False))

    unit_id = tracker.start_upload(apk(), "Android")
    assert tracker.remove_upload(unit_id) is True
    executor.run_all()

    assert tracker.get_unit(unit_id) is None
    assert tracker.finalize(game.id, BuildService()) == []
    assert BuildRecord.query.count() == 0


def test_removing_an_unknown_unit_reports_false():
    tracker, _ = make_tracker(AuthContext(user_id=1))

    assert tracker.remove_upload("missing") is False


def test_failed_transfer_is_isolated(developer, game):
    transport = ScriptedTransport(fail_for={"crypt_ledger_win.zip"})
    tracker, executor = make_tracker(developer, transport)

    windows_id = tracker.start_upload(windows_zip(), "Windows")
    android_id = tracker.start_upload(apk(), "Android")
    executor.run_all()

    windows = tracker.get_unit(windows_id)
    assert windows.state == UploadState.FAILED
    assert windows.progress == 0
    assert "connection reset" in windows.error
    assert tracker.get_unit(android_id).state == UploadState.COMPLETED

    warning = tracker.finalize_warning()
    assert [unit.id for unit in warning.failed] == [windows_id]

    with pytest.raises(FinalizeIncomplete):
        tracker.finalize(game.id, BuildService(), strict=True)
    assert BuildRecord.query.count() == 0

    builds = tracker.finalize(game.id, BuildService())
    assert [build.platform for build in builds] == [Platform.ANDROID]
    assert [unit.id for unit in tracker.units()] == [windows_id]


def test_finalize_warning_lists_pending_and_missing_platforms():
    tracker, executor = make_tracker(AuthContext(user_id=1))

    tracker.start_upload(apk(), "Android")
    executor.run_all()
    pending_id = tracker.start_upload(windows_zip(), "Windows")

    warning = tracker.finalize_warning(["Windows", "Android", "Linux"])

    assert [unit.id for unit in warning.pending] == [pending_id]
    assert warning.missing_platforms == [Platform.WINDOWS, Platform.LINUX]
    assert warning.to_dict()["missing_platforms"] == ["Windows", "Linux"]

    with pytest.raises(ValidationRejected):
        tracker.finalize_warning(["Amiga"])


def test_finalize_warning_is_empty_when_everything_completed():
    tracker, executor = make_tracker(AuthContext(user_id=1))

    tracker.start_upload(apk(), "Android")
    executor.run_all()

    assert tracker.finalize_warning(["Android"]) is None


def test_listener_errors_do_not_stop_the_upload():
    tracker, executor = make_tracker(AuthContext(user_id=1))

    def broken_listener(event):
        raise RuntimeError("listener exploded")

    tracker.subscribe(broken_listener)
    events = []
    unsubscribe = tracker.subscribe(events.append)

    unit_id = tracker.start_upload(apk(), "Android")
    unsubscribe()
    executor.run_all()

    assert tracker.get_unit(unit_id).state == UploadState.COMPLETED
    assert [event.state for event in events] == [UploadState.VALIDATING, UploadState.UPLOADING]


def test_registry_keeps_one_tracker_per_user():
    registry = UploadTrackerRegistry(transport=ScriptedTransport(), executor=ManualExecutor())

    first = registry.tracker_for(AuthContext(user_id=1))
    assert registry.tracker_for(AuthContext(user_id=1)) is first
    assert registry.tracker_for(AuthContext(user_id=2)) is not first

    registry.discard(1)
    assert registry.tracker_for(AuthContext(user_id=1)) is not first

    with pytest.raises(AuthenticationRequired):
        registry.tracker_for(AuthContext.anonymous())


def test_storage_transport_writes_build_and_reports_bytes(tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOADS_DIR", str(tmp_path / "uploads"))
    payload = b"x" * (3 * MIB + 17)
    spooled = tmp_path / "spooled.zip"
    spooled.write_bytes(payload)
    source = UploadSource.from_path(str(spooled), content_type="application/zip", temporary=True)
    reported = []

    file_id = StorageTransport().transfer(source, reported.append, threading.Event())

    stored = tmp_path / "uploads" / StorageService.build_file_path(file_id, "spooled.zip")
    assert stored.read_bytes() == payload
    assert reported[-1] == len(payload)
    assert reported == sorted(reported)
    assert not spooled.exists()


def test_storage_transport_skips_cancelled_queued_transfer(tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOADS_DIR", str(tmp_path / "uploads"))
    spooled = tmp_path / "game.zip"
    spooled.write_bytes(b"x" * MIB)
    reported = []
    cancelled = threading.Event()
    cancelled.set()

    with pytest.raises(TransferCancelled):
        StorageTransport().transfer(
            UploadSource.from_path(str(spooled), temporary=True), reported.append, cancelled
        )

    assert reported == []
    assert not spooled.exists()
    assert not (tmp_path / "uploads" / StorageService.BUILDS_DIR).exists()


def test_storage_transport_removes_partial_file_when_cancelled(tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOADS_DIR", str(tmp_path / "uploads"))
    spooled = tmp_path / "game.zip"
    spooled.write_bytes(b"x" * (3 * MIB))
    cancelled = threading.Event()

    def cancel_after_first_chunk(sent):
        cancelled.set()

    with pytest.raises(TransferCancelled):
        StorageTransport().transfer(UploadSource.from_path(str(spooled)), cancel_after_first_chunk, cancelled)

    builds = tmp_path / "uploads" / StorageService.BUILDS_DIR
    assert not builds.exists() or list(builds.iterdir()) == []
    assert spooled.exists()


def test_upload_endpoints(test_client, clean_database, scripted_transport, upload_executor, tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOADS_DIR", str(tmp_path / "uploads"))
    create_user("endpoint-uploader@example.com")
    assert login(test_client, "endpoint-uploader@example.com", "test1234").status_code == 200

    response = test_client.post(
        "/uploads",
        data={"file": (io.BytesIO(b"apk-bytes" * 100), "game.apk", APK_TYPE), "platform": "Android"},
        content_type="multipart/form-data",
    )
    assert response.status_code == 202
    unit = response.get_json()
    assert unit["state"] == "uploading"
    assert unit["platform"] == "Android"

    response = test_client.get("/uploads")
    assert response.get_json()["warning"]["pending"] == [unit["id"]]

    upload_executor.run_all()

    response = test_client.get(f"/uploads/{unit['id']}")
    assert response.status_code == 200
    assert response.get_json()["state"] == "completed"
    assert test_client.get("/uploads").get_json()["completed"] == 1

    response = test_client.post(
        "/uploads",
        data={"file": (io.BytesIO(b"text"), "readme.txt", "text/plain"), "platform": "Windows"},
        content_type="multipart/form-data",
    )
    assert response.status_code == 400
    assert response.get_json()["error"] == "ValidationRejected"

    assert test_client.delete(f"/uploads/{unit['id']}").status_code == 200
    assert test_client.delete(f"/uploads/{unit['id']}").status_code == 404

    logout(test_client)
    assert test_client.get("/uploads").status_code == 401
