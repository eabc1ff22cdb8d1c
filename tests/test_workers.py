import asyncio
from datetime import date, datetime

from staffdesk import worker
from staffdesk.workers.reminder_loop import run_reminder_pass


def test_reminder_pass_uses_its_own_session(db, telegram, monkeypatch, make_recipient, make_appointment):
    make_appointment(make_recipient(), date(2025, 6, 12), "10:00:00")
    monkeypatch.setattr(
        "staffdesk.services.reminder_service.local_now", lambda: datetime(2025, 6, 12, 9, 30)
    )

    summary = asyncio.run(run_reminder_pass())

    assert summary["reminders_sent"] == 1
    assert len(telegram.messages) == 2


def test_arq_task_runs_the_check(db, telegram):
    summary = asyncio.run(worker.reminder_check_task({"job_id": "cron:reminder_check_task"}))

    assert summary == {"reminders_sent": 0, "total_checked": 0, "results": []}


def test_arq_cron_runs_every_five_minutes():
    cron_job = worker.WorkerSettings.cron_jobs[0]

    assert cron_job.minute == set(range(0, 60, 5))
    assert cron_job.run_at_startup is True
    assert worker.WorkerSettings.functions == [worker.reminder_check_task]
