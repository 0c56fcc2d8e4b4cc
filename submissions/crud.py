from sqlalchemy import desc
from typing import List, Optional
from datetime import datetime, timezone
import itertools
import logging
import threading
from database import build_engine, build_session_factory, create_tables, ensure_database, mask_url
from . import model

logger = logging.getLogger(__name__)

# Integer primary keys are signed 64-bit on every supported backend
MIN_ID = -2**63
MAX_ID = 2**63 - 1

# ---------- SQL repository ---------- #

class SqlSubmissionRepository:
    """Submission storage backed by a relational database through SQLAlchemy."""

    def __init__(self, database_url: str):
        self.database_url = database_url
        self.engine = build_engine(database_url)
        self.SessionLocal = build_session_factory(self.engine)

    def initialize(self) -> None:
        """Create the database and the submissions table if they are missing."""
        logger.info(f"Initializing submissions storage at {mask_url(self.database_url)}")
        ensure_database(self.database_url)
        create_tables(self.engine)

    def create(self, name: str, email: str, message: str, image: Optional[str] = None) -> int:
        with self.SessionLocal() as db:
            db_submission = model.Submission(name=name, email=email, message=message, image=image)
            db.add(db_submission)
            db.commit()
            db.refresh(db_submission)
            return db_submission.id

    def list_all(self) -> List[model.Submission]:
        with self.SessionLocal() as db:
            return (
                db.query(model.Submission)
                .order_by(desc(model.Submission.created_at), desc(model.Submission.id))
                .all()
            )

    def find_image_by_id(self, submission_id: int) -> Optional[str]:
        if not MIN_ID <= submission_id <= MAX_ID:
            return None
        with self.SessionLocal() as db:
            row = db.query(model.Submission.image).filter(model.Submission.id == submission_id).first()
            return row.image if row else None

    def delete_by_id(self, submission_id: int) -> bool:
        # Ids the column cannot hold cannot exist
        if not MIN_ID <= submission_id <= MAX_ID:
            return False
        with self.SessionLocal() as db:
            deleted = db.query(model.Submission).filter(model.Submission.id == submission_id).delete()
            db.commit()
            return deleted > 0

    def dispose(self) -> None:
        self.engine.dispose()

# ---------- In-memory repository ---------- #

class InMemorySubmissionRepository:
    """Process-local stand-in with the same interface, used for demos and tests."""

    def __init__(self):
        self._rows: List[model.Submission] = []
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def initialize(self) -> None:
        logger.info("Using in-memory submissions storage")

    def create(self, name: str, email: str, message: str, image: Optional[str] = None) -> int:
        with self._lock:
            submission = model.Submission(
                id=next(self._ids),
                name=name,
                email=email,
                message=message,
                image=image,
                created_at=datetime.now(timezone.utc),
            )
            self._rows.append(submission)
            return submission.id

    def list_all(self) -> List[model.Submission]:
        with self._lock:
            return sorted(self._rows, key=lambda s: (s.created_at, s.id), reverse=True)

    def find_image_by_id(self, submission_id: int) -> Optional[str]:
        with self._lock:
            for submission in self._rows:
                if submission.id == submission_id:
                    return submission.image
        return None

    def delete_by_id(self, submission_id: int) -> bool:
        with self._lock:
            remaining = [s for s in self._rows if s.id != submission_id]
            deleted = len(remaining) != len(self._rows)
            self._rows = remaining
            return deleted

    def dispose(self) -> None:
        pass


def build_repository(settings):
    """Pick the repository implementation named by the settings."""
    if settings.storage_backend == "memory":
        repository = InMemorySubmissionRepository()
        if settings.seed_sample_data:
            from .sample_data import seed_sample_submissions
            seed_sample_submissions(repository)
        return repository
    if settings.storage_backend == "sql":
        return SqlSubmissionRepository(settings.database_url)
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")
