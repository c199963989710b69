# File: splicer/core/jobs/manager.py

import logging
from datetime import datetime, timezone
from threading import Event
from typing import Optional
from uuid import UUID
from splicer.core.database.connection import SessionLocal
from .models import JobModel
from .types import JobType, JobStatus

logger = logging.getLogger(__name__)

class JobManager:
    """
    The Central Dispatcher.
    It doesn't know *how* to edit a video, but it knows *who* can.
    """

    def submit_job(self, job_type: JobType, params: Optional[dict] = None) -> UUID:
        """Create a Job Record in PENDING state."""
        with SessionLocal() as db:
            job = JobModel(job_type=job_type, payload=dict(params or {}))
            db.add(job)
            db.commit()
            db.refresh(job)
            logger.info(f"Job Submitted: {job.id} [{job_type.value}]")
            return job.id

    def get_status(self, job_id: UUID) -> Optional[JobStatus]:
        with SessionLocal() as db:
            job = db.get(JobModel, job_id)
            return job.status if job else None

    def run_job(self, job_id: UUID, cancel_event: Optional[Event] = None) -> Optional[JobStatus]:
        """
        Executes a specific job by routing it to the video editing handler.

        Returns the final status, or None if the job does not exist.
        """
        # Lazy import to prevent circular dependencies.
        from splicer.features.video_editing.domain.exceptions import EditCancelled

        with SessionLocal() as db:
            job = db.get(JobModel, job_id)
            if not job:
                logger.error(f"Job {job_id} not found.")
                return None

            # Update Status -> PROCESSING
            job.status = JobStatus.PROCESSING
            job.started_at = datetime.now(timezone.utc)
            db.commit()

            try:
                logger.info(f"Starting Job {job_id} ({job.job_type.value})...")

                result = self._route_to_feature(job, cancel_event)

                # Update Status -> COMPLETED
                job.result_meta = result
                job.status = JobStatus.COMPLETED
                logger.info(f"Job {job_id} Completed successfully.")

            except EditCancelled as e:
                job.status = JobStatus.CANCELLED
                job.error_message = str(e)
                logger.warning(f"Job {job_id} Cancelled: {e}")

            except NotImplementedError as e:
                # Configuration error
                job.status = JobStatus.FAILED
                job.error_message = f"Configuration Error: {str(e)}"
                logger.error(f"Job {job_id} Failed: {e}")

            except Exception as e:
                # Execution error
                job.status = JobStatus.FAILED
                job.error_message = str(e)
                logger.exception(f"Job {job_id} Failed: {e}")

            finally:
                job.finished_at = datetime.now(timezone.utc)
                db.commit()

            return job.status

    def _route_to_feature(self, job: JobModel, cancel_event: Optional[Event]) -> dict:
        """
        Routes the job to the correct Feature Handler.
        Uses lazy imports to prevent circular dependencies.
        """
        # Every JobType is an edit; the handler rejects types it cannot serve.
        from splicer.features.video_editing.service.job_handler import VideoEditingHandler
        return VideoEditingHandler().handle(job.job_type, job.payload or {}, cancel_event)
