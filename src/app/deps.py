# src/app/deps.py
from __future__ import annotations

from src.app.config import settings
from src.app.services.workbench_service import WorkbenchService

_service: WorkbenchService | None = None


def get_workbench_service() -> WorkbenchService:
    global _service
    if _service is None:
        _service = WorkbenchService(warn_on_dropped_stacks=settings.WARN_ON_DROPPED_STACKS)
    return _service
