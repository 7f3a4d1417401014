"""Dependency injection singletons for GhostGuard.

The in-memory live state (liveness, command queues, log buffers) is owned
here and handed to the services that need it; nothing else holds it.
"""

from ghostguard.bans.service import BanDirectory
from ghostguard.common.config import get_settings
from ghostguard.common.database import DatabaseManager
from ghostguard.common.persistence import BestEffortWriter
from ghostguard.detections.service import DetectionService
from ghostguard.identity.resolver import IdentityResolver
from ghostguard.identity.service import AccountService
from ghostguard.licensing.service import LicenseAuthority
from ghostguard.live.commands import CommandQueue
from ghostguard.live.liveness import LivenessTracker
from ghostguard.live.logbuffer import LogRingBuffer
from ghostguard.storage.blob import BlobStore, create_blob_store
from ghostguard.telemetry.service import TelemetryService

_db: DatabaseManager | None = None
_writer: BestEffortWriter | None = None
_blob_store: BlobStore | None = None
_tracker: LivenessTracker | None = None
_commands: CommandQueue | None = None
_log_buffer: LogRingBuffer | None = None
_resolver: IdentityResolver | None = None
_licensing: LicenseAuthority | None = None
_accounts: AccountService | None = None
_telemetry: TelemetryService | None = None
_bans: BanDirectory | None = None
_detections: DetectionService | None = None


def get_db() -> DatabaseManager:
    global _db
    if _db is None:
        _db = DatabaseManager(get_settings())
    return _db


def get_best_effort_writer() -> BestEffortWriter:
    global _writer
    if _writer is None:
        _writer = BestEffortWriter(get_db())
    return _writer


def get_blob_store() -> BlobStore:
    global _blob_store
    if _blob_store is None:
        _blob_store = create_blob_store(get_settings())
    return _blob_store


# ── Live state ──

def get_liveness_tracker() -> LivenessTracker:
    global _tracker
    if _tracker is None:
        _tracker = LivenessTracker(online_window=get_settings().online_window_seconds)
    return _tracker


def get_command_queue() -> CommandQueue:
    global _commands
    if _commands is None:
        settings = get_settings()
        _commands = CommandQueue(
            capacity=settings.command_queue_capacity,
            trim=settings.command_queue_trim,
        )
    return _commands


def get_log_buffer() -> LogRingBuffer:
    global _log_buffer
    if _log_buffer is None:
        _log_buffer = LogRingBuffer(capacity=get_settings().log_buffer_capacity)
    return _log_buffer


# ── Services ──

def get_identity_resolver() -> IdentityResolver:
    global _resolver
    if _resolver is None:
        _resolver = IdentityResolver()
    return _resolver


def get_license_authority() -> LicenseAuthority:
    global _licensing
    if _licensing is None:
        _licensing = LicenseAuthority(get_settings(), resolver=get_identity_resolver())
    return _licensing


def get_account_service() -> AccountService:
    global _accounts
    if _accounts is None:
        _accounts = AccountService(get_identity_resolver())
    return _accounts


def get_telemetry_service() -> TelemetryService:
    global _telemetry
    if _telemetry is None:
        _telemetry = TelemetryService(
            get_settings(),
            get_db(),
            get_liveness_tracker(),
            get_command_queue(),
            get_log_buffer(),
            get_best_effort_writer(),
            resolver=get_identity_resolver(),
        )
    return _telemetry


def get_ban_directory() -> BanDirectory:
    global _bans
    if _bans is None:
        _bans = BanDirectory(
            get_settings(),
            get_command_queue(),
            get_blob_store(),
            resolver=get_identity_resolver(),
        )
    return _bans


def get_detection_service() -> DetectionService:
    global _detections
    if _detections is None:
        _detections = DetectionService(
            get_db(),
            get_best_effort_writer(),
            resolver=get_identity_resolver(),
        )
    return _detections


def reset_singletons() -> None:
    """Reset all singletons (for testing)."""
    global _db, _writer, _blob_store, _tracker, _commands, _log_buffer
    global _resolver, _licensing, _accounts, _telemetry, _bans, _detections
    _db = None
    _writer = None
    _blob_store = None
    _tracker = None
    _commands = None
    _log_buffer = None
    _resolver = None
    _licensing = None
    _accounts = None
    _telemetry = None
    _bans = None
    _detections = None
