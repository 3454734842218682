# models/job_run.py
"""
JobRun model - durable claim record for scheduled jobs.

The unique (job_name, run_key) pair lets several scheduler instances,
process restarts or a double cron firing race for the same slot: only
the first insert wins, the others skip the run.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, UniqueConstraint, func
from .base import Base


class JobRun(Base):
     __tablename__ = "job_runs"
     __table_args__ = (UniqueConstraint("job_name", "run_key", name="uq_job_runs_job_name_run_key"),)

     id = Column(Integer, primary_key=True, autoincrement=True)
     job_name = Column(String(100), nullable=False)
     run_key = Column(String(32), nullable=False)  # e.g. "2024-01-05" or "2024-01-05T08"
     status = Column(String(20), nullable=False, default="running")  # running, succeeded, failed
     processed = Column(Integer, nullable=False, default=0)
     error = Column(Text, nullable=True)
     started_at = Column(DateTime, server_default=func.now(), nullable=False)
     finished_at = Column(DateTime, nullable=True)

     def __repr__(self):
          return f"<JobRun(job_name='{self.job_name}', run_key='{self.run_key}', status='{self.status}')>"
