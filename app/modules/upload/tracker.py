import logging
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from app.modules.auth.context import AuthContext
from app.modules.build.models import DEFAULT_BUILD_VERSION
from app.modules.game.models import Platform
from app.modules.upload.exceptions import FinalizeIncomplete, TransferCancelled, TransferFailed, ValidationRejected
from app.modules.upload.units import UploadEvent, UploadSource, UploadState, UploadUnit
from app.modules.upload.validation import validate_upload
from core.configuration.configuration import upload_max_bytes, upload_workers

logger = logging.getLogger(__name__)

Listener = Callable[[UploadEvent], None]


class UploadTracker:
    """Tracks the uploads one user runs while preparing a game submission.

    Every accepted file becomes a unit with its own progress counter and
    failure domain. Transfers run on ``executor``; all state changes go
    through this object under one lock, and callbacks for a unit that has
    been removed are ignored.
    """

    def __init__(self, auth: AuthContext, transport, executor=None, max_bytes: Optional[int] = None):
        self.auth = auth
        self.transport = transport
        self.executor = executor or ThreadPoolExecutor(max_workers=upload_workers(), thread_name_prefix="upload")
        self.max_bytes = max_bytes if max_bytes is not None else upload_max_bytes()
        self._units: Dict[str, UploadUnit] = {}
        self._cancel_events: Dict[str, threading.Event] = {}
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()

    # Notifications

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, unit: UploadUnit):
        event = UploadEvent(unit.snapshot())
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Upload listener failed on unit %s", unit.id)

    # Queries

    def get_unit(self, unit_id: str) -> Optional[UploadUnit]:
        with self._lock:
            unit = self._units.get(unit_id)
            return unit.snapshot() if unit else None

    def units(self) -> List[UploadUnit]:
        with self._lock:
            return [unit.snapshot() for unit in self._units.values()]

    def completed_units(self) -> List[UploadUnit]:
        return [unit for unit in self.units() if unit.state == UploadState.COMPLETED]

    # Lifecycle

    def start_upload(self, source: UploadSource, platform, version: str = DEFAULT_BUILD_VERSION) -> str:
        """Validate ``source`` and start moving it to storage in the background.

        Returns the new unit id as soon as the transfer is scheduled. A file
        that fails validation raises ``ValidationRejected`` and is not tracked.
        """
        self.auth.require_user()
        unit = UploadUnit(
            id=uuid.uuid4().hex,
            file_name=source.file_name,
            file_size=source.file_size,
            content_type=source.content_type,
            version=version or DEFAULT_BUILD_VERSION,
        )
        with self._lock:
            self._emit(unit)

        try:
            unit.platform = validate_upload(
                source.file_name, source.file_size, source.content_type, platform, unit.version, self.max_bytes
            )
        except ValidationRejected as exc:
            unit.state = UploadState.REJECTED
            unit.error = exc.message
            if source.temporary:
                source.discard()
            with self._lock:
                self._emit(unit)
            logger.info("Upload of %s rejected: %s", source.file_name, exc.message)
            raise

        cancel = threading.Event()
        with self._lock:
            unit.state = UploadState.UPLOADING
            self._units[unit.id] = unit
            self._cancel_events[unit.id] = cancel
            self._emit(unit)

        try:
            self.executor.submit(self._run_transfer, unit.id, source, cancel)
        except RuntimeError as exc:
            logger.exception("Could not schedule upload %s", unit.id)
            self._fail(unit.id, TransferFailed(f"Could not schedule the transfer: {exc}"))
        return unit.id

    def _run_transfer(self, unit_id: str, source: UploadSource, cancel: threading.Event):
        try:
            file_id = self.transport.transfer(
                source,
                on_progress=lambda sent: self._report_progress(unit_id, sent),
                cancelled=cancel,
            )
        except TransferCancelled:
            logger.info("Upload %s cancelled", unit_id)
            return
        except Exception as exc:
            logger.exception("Upload %s failed", unit_id)
            self._fail(unit_id, TransferFailed(str(exc) or exc.__class__.__name__))
            return
        self._complete(unit_id, file_id)

    def _report_progress(self, unit_id: str, sent: int):
        with self._lock:
            unit = self._units.get(unit_id)
            if unit is None or unit.state != UploadState.UPLOADING:
                return
            unit.bytes_sent = max(unit.bytes_sent, sent)
            # 100 is reserved for a finished transfer.
            percent = min(99, unit.bytes_sent * 100 // unit.file_size)
            if percent <= unit.progress:
                return
            unit.progress = percent
            self._emit(unit)

    def _complete(self, unit_id: str, file_id: str):
        with self._lock:
            unit = self._units.get(unit_id)
            if unit is None or unit.state != UploadState.UPLOADING:
                logger.info("Ignoring completion of upload %s, no longer tracked", unit_id)
                return
            unit.state = UploadState.COMPLETED
            unit.progress = 100
            unit.bytes_sent = unit.file_size
            unit.storage_file_id = file_id
            unit.download_url = self.transport.download_url(file_id)
            unit.completed_at = datetime.now(timezone.utc)
            self._cancel_events.pop(unit_id, None)
            self._emit(unit)

    def _fail(self, unit_id: str, error: TransferFailed):
        with self._lock:
            unit = self._units.get(unit_id)
            if unit is None or unit.state != UploadState.UPLOADING:
                return
            unit.state = UploadState.FAILED
            unit.progress = 0
            unit.error = error.message
            self._cancel_events.pop(unit_id, None)
            self._emit(unit)

    def remove_upload(self, unit_id: str) -> bool:
        """Stop tracking a unit in any phase and ask its transfer to stop."""
        with self._lock:
            unit = self._units.pop(unit_id, None)
            cancel = self._cancel_events.pop(unit_id, None)
        if cancel is not None:
            cancel.set()
        if unit is not None:
            logger.info("Upload %s removed while %s", unit_id, unit.state.value)
        return unit is not None

    # Submission

    def finalize_warning(self, required_platforms=()) -> Optional[FinalizeIncomplete]:
        try:
            required = [Platform.parse(p) for p in required_platforms]
        except ValueError as exc:
            raise ValidationRejected(str(exc)) from None
        with self._lock:
            units = [unit.snapshot() for unit in self._units.values()]
        pending = [u for u in units if u.state == UploadState.UPLOADING]
        failed = [u for u in units if u.state == UploadState.FAILED]
        covered = {u.platform for u in units if u.state == UploadState.COMPLETED}
        missing = [p for p in required if p not in covered]
        if not (pending or failed or missing):
            return None
        return FinalizeIncomplete(pending=pending, failed=failed, missing_platforms=missing)

    def finalize(self, game_id: int, build_service, strict: bool = False, required_platforms=()):
        """Link every completed unit to ``game_id`` as a BuildRecord.

        Units that are still uploading or have failed are left in the tracker.
        With ``strict`` the call refuses to link anything while such units (or
        uncovered ``required_platforms``) exist.
        """
        user_id = self.auth.require_user()
        if strict:
            warning = self.finalize_warning(required_platforms)
            if warning is not None:
                raise warning

        with self._lock:
            completed = [u.snapshot() for u in self._units.values() if u.state == UploadState.COMPLETED]

        builds = build_service.link_completed_units(game_id, user_id, completed)

        with self._lock:
            for unit in completed:
                self._units.pop(unit.id, None)
        return builds
