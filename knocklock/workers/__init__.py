# =======================================================================================
# knocklock/workers/__init__.py - Workers Package
# =======================================================================================
from .retention_worker import RetentionWorker

__all__ = ["RetentionWorker"]
