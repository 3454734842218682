"""
Scheduled job runner.

Each job run claims a (job_name, run_key) row in job_runs before doing
any work. The run key is the day for daily jobs and a 4-hour slot for
maintenance escalation, so a second cron firing, a restarted process or
another instance finds the slot taken and skips it.

The claim is committed in its own session; the job itself runs in a
second session that commits or rolls back as a whole.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_session_context
from exceptions import ValidationError
from models import JobRun
from services.lease_service import LeaseService
from services.maintenance_service import check_maintenance_escalation
from services.notification_service import NotificationDispatcher
from services.payment_service import check_overdue_payments
from services.renewal_service import check_lease_renewals

logger = logging.getLogger(__name__)

ESCALATION_SLOT_HOURS = 4


def _daily_key(now: datetime) -> str:
     return now.date().isoformat()


def _four_hour_slot_key(now: datetime) -> str:
     slot_hour = now.hour - now.hour % ESCALATION_SLOT_HOURS
     return f"{now.date().isoformat()}T{slot_hour:02d}"


@dataclass(frozen=True)
class Job:
     name: str
     run: Callable[[Session, NotificationDispatcher, datetime], int]
     run_key: Callable[[datetime], str]
     daily: bool = True


JOBS: Dict[str, Job] = {
     job.name: job
     for job in (
          Job(
               "overdue-payments",
               lambda db, notifier, now: check_overdue_payments(db, notifier, today=now.date()),
               _daily_key,
          ),
          Job(
               "lease-renewals",
               lambda db, notifier, now: check_lease_renewals(db, notifier, today=now.date()),
               _daily_key,
          ),
          Job(
               "lease-expiry",
               lambda db, notifier, now: LeaseService.expire_ended_leases(db, notifier, today=now.date()),
               _daily_key,
          ),
          Job(
               "maintenance-escalation",
               lambda db, notifier, now: check_maintenance_escalation(db, notifier, now=now),
               _four_hour_slot_key,
               daily=False,
          ),
     )
}

DAILY_JOBS = [name for name, job in JOBS.items() if job.daily]


@dataclass
class JobResult:
     job_name: str
     run_key: str
     status: str  # succeeded, failed, skipped
     processed: int = 0
     error: Optional[str] = None


def get_job(job_name: str) -> Job:
     try:
          return JOBS[job_name]
     except KeyError:
          raise ValidationError(f"Unknown job '{job_name}'. Available: {', '.join(JOBS)}") from None


def claim_job(db: Session, job_name: str, run_key: str) -> Optional[JobRun]:
     """
     Insert the job_runs row for this slot.

     Returns:
          The claimed JobRun, or None when the slot was already claimed
     """
     run = JobRun(job_name=job_name, run_key=run_key, status="running", started_at=datetime.now())
     try:
          with db.begin_nested():
               db.add(run)
     except IntegrityError:
          logger.info("Job %s already claimed for %s, skipping", job_name, run_key)
          return None
     return run


def _finish_run(session_factory, run_id: int, status: str, processed: int, error: Optional[str] = None) -> None:
     with get_session_context(session_factory) as db:
          run = db.get(JobRun, run_id)
          run.status = status
          run.processed = processed
          run.error = error
          run.finished_at = datetime.now()


def run_job(
     job_name: str,
     now: Optional[datetime] = None,
     force: bool = False,
     session_factory: Optional[Callable[[], Session]] = None,
) -> JobResult:
     """
     Claim and run one scheduled job.

     Args:
          job_name: One of JOBS
          now: Point in time the job runs for (default: now)
          force: Run even when the slot was already claimed; the forced
               run gets its own key suffixed with the start time
          session_factory: Session factory (default: database.SessionLocal)

     Returns:
          JobResult; status "skipped" when another run owns the slot
     """
     job = get_job(job_name)
     now = now or datetime.now()
     run_key = job.run_key(now)
     if force:
          run_key = f"{run_key}@{datetime.now():%H%M%S}"

     with get_session_context(session_factory) as db:
          claim = claim_job(db, job.name, run_key)
          if claim is None:
               return JobResult(job.name, run_key, "skipped")
          run_id = claim.id

     logger.info("Running job %s (%s)", job.name, run_key)
     try:
          with get_session_context(session_factory) as db:
               processed = job.run(db, NotificationDispatcher(db), now)
     except Exception as exc:
          logger.exception("Job %s (%s) failed", job.name, run_key)
          _finish_run(session_factory, run_id, "failed", 0, str(exc))
          return JobResult(job.name, run_key, "failed", error=str(exc))

     _finish_run(session_factory, run_id, "succeeded", processed)
     logger.info("Job %s (%s) processed %d records", job.name, run_key, processed)
     return JobResult(job.name, run_key, "succeeded", processed=processed)


def run_daily_jobs(
     now: Optional[datetime] = None,
     force: bool = False,
     session_factory: Optional[Callable[[], Session]] = None,
) -> List[JobResult]:
     """Run every daily job for one day; a failing job doesn't stop the rest."""
     return [run_job(name, now=now, force=force, session_factory=session_factory) for name in DAILY_JOBS]
