"""
HTTP host for autocommitter.

An editor plugin reports activity pulses and toggles auto-commit through
this API; the scheduler and commit pipeline run inside the server's event
loop. Services are built once at startup and kept on `app.state`.
"""

import json
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request

from .commit import CommitPipeline, FailoverOrchestrator
from .config import Settings
from .errors import ErrorFormatter
from .llm import ProviderRegistry, create_registry
from .notifications import LoggingNotifier
from .repository import IgnoreRules, LocalRepository
from .scheduler import ActivityScheduler
from .version import VersionCoordinator, VersionFileStore

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@dataclass
class Services:
    """Everything one server instance runs on"""
    settings: Settings
    registry: ProviderRegistry
    notifier: LoggingNotifier
    orchestrator: FailoverOrchestrator
    version_coordinator: VersionCoordinator
    pipeline: CommitPipeline
    scheduler: ActivityScheduler


def build_services(settings: Settings, repository=None, registry: Optional[ProviderRegistry] = None) -> Services:
    """
    Construct and wire all services for a settings object.

    Args:
        settings: Application settings
        repository: Git collaborator (defaults to LocalRepository at repo_path)
        registry: Provider registry (defaults to one built from settings)

    Returns:
        Services
    """
    repository = repository or LocalRepository(settings.repo_path)
    registry = registry or create_registry(settings)
    notifier = LoggingNotifier()

    orchestrator = FailoverOrchestrator(registry, notifier)
    version_coordinator = VersionCoordinator(
        VersionFileStore(settings.repo_path),
        enabled=settings.version_bumping_enabled
    )
    ignore_rules = IgnoreRules(
        settings.repo_path,
        ignored_patterns=settings.ignored_patterns,
        gitattributes_patterns=settings.gitattributes_patterns
    )
    pipeline = CommitPipeline(
        repository,
        orchestrator,
        version_coordinator,
        notifier,
        settings,
        ignore_rules=ignore_rules
    )
    scheduler = ActivityScheduler(
        pipeline.run,
        period=settings.commit_interval,
        inactivity_delay=settings.inactivity_delay
    )

    return Services(
        settings=settings,
        registry=registry,
        notifier=notifier,
        orchestrator=orchestrator,
        version_coordinator=version_coordinator,
        pipeline=pipeline,
        scheduler=scheduler,
    )


async def _read_json(request: Request) -> dict:
    body = await request.body()
    if not body:
        return {}
    try:
        payload = json.loads(body)
    except json.JSONDecodeError:
        raise HTTPException(status_code=400, detail="Invalid JSON payload")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Payload must be a JSON object")
    return payload


def create_app(settings: Optional[Settings] = None, services: Optional[Services] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Settings to build services from (defaults to the environment)
        services: Prebuilt services (tests inject fakes here)

    Returns:
        FastAPI app
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        nonlocal services
        if services is None:
            services = build_services(settings or Settings.from_env())
        app.state.services = services

        if services.settings.enabled:
            services.scheduler.enable()
        logger.info(f"autocommitter watching {services.settings.repo_path}")

        yield

        services.scheduler.disable()
        await services.scheduler.wait_idle()
        await services.registry.aclose()
        logger.info("autocommitter stopped")

    app = FastAPI(title="autocommitter - AI commit message automation", lifespan=lifespan)

    def get_services(request: Request) -> Services:
        return request.app.state.services

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "service": "autocommitter"}

    @app.get("/")
    async def root():
        """Root endpoint with service info"""
        return {
            "name": "autocommitter",
            "description": "Automatic git commits with AI-generated conventional commit messages",
            "version": VERSION,
            "features": [
                "Ranked AI provider failover",
                "Conventional commit validation",
                "Activity and interval driven commits",
                "Semantic version bumping",
            ]
        }

    @app.get("/status")
    async def status(request: Request):
        """Scheduler, pipeline and provider state"""
        s = get_services(request)
        last = s.pipeline.last_result
        return {
            "repo_path": s.settings.repo_path,
            "auto_commit_enabled": s.scheduler.enabled,
            "period": s.scheduler.period,
            "inactivity_delay": s.scheduler.inactivity_delay,
            "runs_in_flight": s.scheduler.in_flight,
            "pipeline_running": s.pipeline.running,
            "version_bump_in_progress": s.version_coordinator.in_progress,
            "primary_provider": (
                s.settings.primary_provider.value if s.settings.primary_provider else None
            ),
            "configured_providers": [
                {"provider": c.identity.value, "model": c.model, "rank": c.rank}
                for c in s.registry.list_configured(s.settings.primary_provider)
            ],
            "last_run": last.to_dict() if last else None,
        }

    @app.post("/activity")
    async def activity(request: Request):
        """Editor activity pulse (edit, selection, focus)"""
        payload = await _read_json(request)
        kind = str(payload.get("kind", "edit"))
        accepted = get_services(request).scheduler.record_activity(kind)
        return {"accepted": accepted, "kind": kind}

    @app.post("/commit")
    async def commit_now(request: Request):
        """Run the commit pipeline once and wait for the result"""
        result = await get_services(request).pipeline.run()
        return result.to_dict()

    @app.post("/auto-commit/enable")
    async def enable_auto_commit(request: Request):
        """Enable (or restart) the scheduler timers"""
        payload = await _read_json(request)
        period = payload.get("period")
        if period is not None:
            try:
                period = float(period)
            except (TypeError, ValueError):
                raise HTTPException(status_code=400, detail="period must be a number of seconds")
            if period <= 0:
                raise HTTPException(status_code=400, detail="period must be positive")

        scheduler = get_services(request).scheduler
        scheduler.enable(period)
        return {"enabled": True, "period": scheduler.period}

    @app.post("/auto-commit/disable")
    async def disable_auto_commit(request: Request):
        """Disable the scheduler timers; in-flight runs finish on their own"""
        get_services(request).scheduler.disable()
        return {"enabled": False}

    @app.get("/failover/last")
    async def last_failover(request: Request):
        """Attempt log of the most recent message generation"""
        s = get_services(request)
        result = s.orchestrator.last_result
        if result is None:
            raise HTTPException(status_code=404, detail="No message generation yet")
        return {
            "message": result.message,
            "provider": result.provider.value if result.provider else None,
            "duration_ms": result.duration_ms,
            "attempts": [a.to_dict() for a in result.attempts],
            "details": ErrorFormatter.format_attempt_details(result.attempts),
        }

    @app.get("/notifications")
    async def notifications(request: Request, limit: int = Query(50, ge=1)):
        """Recent user notifications, oldest first"""
        items = get_services(request).notifier.recent(limit)
        return {"notifications": [n.to_dict() for n in items]}

    return app
