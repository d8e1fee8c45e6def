from __future__ import annotations

import json
import logging
from unittest.mock import AsyncMock, patch

import pytest

from stagelog.logging_config import ContextAdapter, configure_logging
from stagelog.schemas import IntegrationResult
from stagelog.services import scheduler as scheduler_module


# ---------------------------------------------------------------------------
# Scheduler
# ---------------------------------------------------------------------------
class TestScheduler:
    @pytest.mark.asyncio
    async def test_daily_job_registered(self):
        with patch.object(scheduler_module.settings, "run_schedule", "05:30"):
            scheduler_module.start_scheduler("actor-1", "caveat")
            try:
                job = scheduler_module.scheduler.get_job("daily_ingestion")
                assert job is not None
                assert job.args == ("actor-1", "caveat")
                assert job.next_run_time.hour == 5
                assert job.next_run_time.minute == 30
            finally:
                scheduler_module.stop_scheduler()

        assert not scheduler_module.scheduler.running

    @pytest.mark.asyncio
    async def test_job_runs_ingestion(self):
        result = IntegrationResult(performances_created=2)
        with patch.object(scheduler_module, "run_ingestion", AsyncMock(return_value=result)) as run:
            await scheduler_module._run_ingestion_job("actor-1", None)

        run.assert_awaited_once_with("actor-1", None)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
class TestLogging:
    def test_json_records_carry_context(self, capsys):
        original = logging.root.handlers[:]
        try:
            configure_logging("INFO")
            log = ContextAdapter(logging.getLogger("stagelog.test"), {"adapter": "caveat"})
            log.info("Parsed %d events", 3, extra={"events_found": 3})

            record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        finally:
            logging.root.handlers = original

        assert record["message"] == "Parsed 3 events"
        assert record["level"] == "INFO"
        assert record["logger"] == "stagelog.test"
        assert record["adapter"] == "caveat"
        assert record["events_found"] == 3
        assert "timestamp" in record
