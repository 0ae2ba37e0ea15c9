"""
Tests for the Celery analysis task
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.models import JobStatus
from app.schemas.analysis import FitDecision, FitRoute
from app.services.pipeline import PipelineResult
from app.tasks.analysis import analyze_job, run_analysis


class TestAnalyzeJobTask:
    """Test task configuration and the sync wrapper."""

    def test_no_automatic_retries(self):
        assert analyze_job.max_retries == 0

    def test_late_acknowledgement(self):
        assert analyze_job.acks_late is True

    def test_returns_run_stats(self):
        stats = {"job_id": "job-1", "status": "COMPLETED", "fit_score": 90}

        with patch("app.tasks.analysis.run_analysis", new=AsyncMock(return_value=stats)) as run:
            assert analyze_job("job-1") == stats

        run.assert_awaited_once_with("job-1")

    def test_failure_propagates(self):
        with patch("app.tasks.analysis.run_analysis", new=AsyncMock(side_effect=RuntimeError("db down"))):
            with pytest.raises(RuntimeError):
                analyze_job("job-1")


class TestRunAnalysis:
    """Test per-run resource handling."""

    @pytest.fixture
    def resources(self):
        gateway = MagicMock()
        gateway.client.close = AsyncMock()
        cache = MagicMock()
        cache.close = AsyncMock()
        engine = MagicMock()
        engine.dispose = AsyncMock()
        pipeline = MagicMock()
        pipeline.run = AsyncMock(return_value=PipelineResult(
            job_id="job-1",
            status=JobStatus.COMPLETED,
            fit=FitDecision(score=75, route=FitRoute.PROCEED, reasoning=[]),
        ))

        with patch("app.services.llm_gateway.build_llm_gateway", return_value=gateway), \
                patch("app.services.cache.EmbeddingCache", return_value=cache), \
                patch("app.database.async_session", MagicMock()), \
                patch("app.database.engine", engine), \
                patch("app.services.pipeline.AnalysisPipeline", return_value=pipeline):
            yield gateway, cache, engine, pipeline

    @pytest.mark.asyncio
    async def test_runs_pipeline_and_releases_connections(self, resources):
        gateway, cache, engine, pipeline = resources

        stats = await run_analysis("job-1")

        assert stats == {"job_id": "job-1", "status": "COMPLETED", "fit_score": 75}
        pipeline.run.assert_awaited_once_with("job-1")
        cache.close.assert_awaited_once()
        gateway.client.close.assert_awaited_once()
        engine.dispose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_releases_connections_on_failure(self, resources):
        gateway, cache, engine, pipeline = resources
        pipeline.run.side_effect = RuntimeError("db down")

        with pytest.raises(RuntimeError):
            await run_analysis("job-1")

        engine.dispose.assert_awaited_once()
        cache.close.assert_awaited_once()
