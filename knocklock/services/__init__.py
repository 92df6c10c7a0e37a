# =======================================================================================
# knocklock/services/__init__.py - Services Package
# =======================================================================================
from .store_client import RemoteStore, SqlStore
from .audit_sink import AuditSink
from .sync_service import CollectionSynchronizer
from .command_service import CommandService
from .entity_service import EntityService
from .pattern_recorder import PatternRecorder
from .retention_service import RetentionPruner

__all__ = [
    "RemoteStore", "SqlStore", "AuditSink", "CollectionSynchronizer",
    "CommandService", "EntityService", "PatternRecorder", "RetentionPruner",
]
