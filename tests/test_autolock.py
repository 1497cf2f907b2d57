"""Tests for automatic locking at configured lock times."""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from sqlmodel import Session, select

from app.checklist.autolock import auto_lock_due_shifts, lock_deadline
from app.checklist.seeding import seed_shift
from app.checklist.templates import set_lock_time
from app.models import ChecklistShift, Restaurant, ShiftKind

TORONTO = ZoneInfo("America/Toronto")
DATE = "2024-06-01"


class TestLockDeadline:
    """Tests for the instant a shift's lock time falls on."""

    def test_daytime_lock_is_same_day(self):
        """Test a daytime lock falls on the business date itself."""
        assert lock_deadline(DATE, "17:00", TORONTO, 5) == datetime(2024, 6, 1, 17, 0, tzinfo=TORONTO)

    def test_after_midnight_lock_is_next_day(self):
        """Test a lock before the cutoff falls on the next civil day."""
        assert lock_deadline(DATE, "02:30", TORONTO, 5) == datetime(2024, 6, 2, 2, 30, tzinfo=TORONTO)

    def test_lock_at_cutoff_ends_business_day(self):
        """Test a lock at the cutoff ends the business day."""
        assert lock_deadline(DATE, "05:00", TORONTO, 5) == datetime(2024, 6, 2, 5, 0, tzinfo=TORONTO)


class TestAutoLock:
    """Tests for the auto-lock job."""

    def _seed_all(self, session: Session):
        for kind in ShiftKind:
            seed_shift(session, "tulia", DATE, kind)

    def _locked(self, session: Session) -> set[str]:
        records = session.exec(select(ChecklistShift).where(ChecklistShift.locked == True)).all()  # noqa: E712
        return {r.shift.value for r in records}

    def test_locks_only_shifts_past_deadline(self, session: Session, restaurant: Restaurant):
        """Test only shifts whose lock time has passed are locked."""
        self._seed_all(session)
        # 18:00 EDT on the business date
        now = datetime(2024, 6, 1, 22, 0, tzinfo=UTC)

        locked = auto_lock_due_shifts(session, now=now)

        assert locked == [("tulia", DATE, "mid")]
        assert self._locked(session) == {"mid"}
        record = session.get(ChecklistShift, ("tulia", DATE, ShiftKind.MID))
        assert record.completed_by_user_id == "system"
        assert record.completed_by_name == "Auto-lock"

    def test_close_locks_after_midnight(self, session: Session, restaurant: Restaurant):
        """Test the close shift locks after midnight on the same business date."""
        self._seed_all(session)
        # 03:00 EDT the next civil day, still the same business date
        now = datetime(2024, 6, 2, 7, 0, tzinfo=UTC)

        auto_lock_due_shifts(session, now=now)
        assert self._locked(session) == {"mid", "close"}

    def test_previous_business_date_is_checked(self, session: Session, restaurant: Restaurant):
        """Test shifts of the previous business date are still locked."""
        self._seed_all(session)
        # 06:00 EDT, the next business date has started
        now = datetime(2024, 6, 2, 10, 0, tzinfo=UTC)

        auto_lock_due_shifts(session, now=now)
        assert self._locked(session) == {"open", "mid", "close"}

    def test_uses_configured_lock_time(self, session: Session, restaurant: Restaurant):
        """Test a configured lock time replaces the default."""
        self._seed_all(session)
        set_lock_time(session, "tulia", ShiftKind.MID, "19:00")
        now = datetime(2024, 6, 1, 22, 0, tzinfo=UTC)

        assert auto_lock_due_shifts(session, now=now) == []

    def test_unopened_shifts_are_not_created(self, session: Session, restaurant: Restaurant):
        """Test the job never seeds shifts."""
        now = datetime(2024, 6, 2, 10, 0, tzinfo=UTC)
        assert auto_lock_due_shifts(session, now=now) == []
        assert session.exec(select(ChecklistShift)).all() == []

    def test_already_locked_shift_skipped(self, session: Session, restaurant: Restaurant):
        """Test a locked shift is not submitted twice."""
        self._seed_all(session)
        now = datetime(2024, 6, 1, 22, 0, tzinfo=UTC)
        auto_lock_due_shifts(session, now=now)
        assert auto_lock_due_shifts(session, now=now) == []
