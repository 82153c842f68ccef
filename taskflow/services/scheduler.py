# taskflow/services/scheduler.py
"""
Scheduler service for periodic maintenance of uploaded files
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from taskflow.config import Settings, get_settings
from taskflow.database import SessionLocal
from taskflow.models.task import TaskAttachment
from taskflow.services.file_storage import FileStorageService, get_file_storage

logger = logging.getLogger(__name__)


def sweep_orphaned_uploads(db: Session, storage: FileStorageService, min_age_seconds: int) -> int:
    """Delete upload files that no attachment row points at"""
    known_paths = [row[0] for row in db.query(TaskAttachment.file_path).all()]
    return storage.cleanup_orphaned_files(known_paths, min_age_seconds=min_age_seconds)


class StorageScheduler:
    """Runs the orphaned upload sweep on an interval"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.scheduler = AsyncIOScheduler()
        self.is_running = False

    def start(self):
        """Start the scheduler"""
        if self.is_running:
            return
        if self.settings.orphan_sweep_minutes <= 0:
            logger.info("Orphaned upload sweep disabled")
            return

        self.scheduler.add_job(
            self.run_orphan_sweep,
            trigger=IntervalTrigger(minutes=self.settings.orphan_sweep_minutes),
            id='sweep_orphaned_uploads',
            name='Sweep Orphaned Uploads',
            replace_existing=True
        )
        self.scheduler.start()
        self.is_running = True
        logger.info("Storage scheduler started, sweeping every %d minutes", self.settings.orphan_sweep_minutes)

    def stop(self):
        """Stop the scheduler"""
        if self.is_running:
            self.scheduler.shutdown()
            self.is_running = False
            logger.info("Storage scheduler stopped")

    async def run_orphan_sweep(self) -> int:
        # Directory scans and unlinks block, so keep them off the event loop
        return await asyncio.to_thread(self.sweep_once)

    def sweep_once(self) -> int:
        db = SessionLocal()
        try:
            removed = sweep_orphaned_uploads(db, get_file_storage(), self.settings.orphan_min_age_seconds)
            if removed:
                logger.warning("Removed %d orphaned upload(s)", removed)
            return removed
        except Exception:
            # A failed sweep must not kill the scheduler; the next run retries
            logger.exception("Orphaned upload sweep failed")
            return 0
        finally:
            db.close()

    def get_status(self) -> Dict[str, Any]:
        """Get scheduler status and job information"""
        if not self.is_running:
            return {"status": "stopped", "jobs": []}

        jobs = []
        for job in self.scheduler.get_jobs():
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
                "trigger": str(job.trigger)
            })

        return {
            "status": "running",
            "jobs": jobs
        }

# Global scheduler instance
storage_scheduler = StorageScheduler()
