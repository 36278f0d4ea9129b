"""
Application wiring.

Production: secrets from Vault -> Postgres/Valkey clients -> store and
services -> FastAPI app. The app lifespan starts the dispatch loop and
stops it on shutdown.

    uvicorn bootstrap:create_production_app --factory
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI

from api.errors import register_error_handlers
from api.inbound import create_inbound_router
from api.jobs import create_jobs_router
from api.middleware import RequestIDMiddleware
from core.config import SchedulerConfig
from core.event_bus import EventBus
from core.services.conversation_service import ConversationService
from core.services.dispatch_worker import DispatchLock, DispatchWorker, Transport
from core.services.edit_service import MessageEditHandler
from core.services.inbound_service import InboundMessageHandler
from core.services.job_store import SchedulingStore
from core.services.schedule_service import JobScheduler, ScheduleCommandHandler
from core.services.view_service import MessageViewHandler, MessageViewPaginator, ViewStatsRecorder
from utils.periodic import PeriodicTask

logger = logging.getLogger(__name__)


@dataclass
class Services:
    store: SchedulingStore
    inbound: InboundMessageHandler
    worker: DispatchWorker
    dispatcher: PeriodicTask
    event_bus: EventBus
    config: SchedulerConfig


def build_services(
    store: SchedulingStore,
    transport: Transport,
    view_stats: ViewStatsRecorder,
    config: SchedulerConfig | None = None,
    event_bus: EventBus | None = None,
    dispatch_lock: DispatchLock | None = None,
) -> Services:
    """Assemble the services around an already-constructed store and transport."""
    config = config or SchedulerConfig()
    event_bus = event_bus or EventBus()

    scheduler = JobScheduler(store, config, event_bus)
    inbound = InboundMessageHandler(
        commands=ScheduleCommandHandler(scheduler),
        views=MessageViewHandler(MessageViewPaginator(store), view_stats, config.page_size),
        conversations=ConversationService(store, scheduler),
        edits=MessageEditHandler(store, config, event_bus),
    )
    worker = DispatchWorker(store, transport, config, event_bus=event_bus, lock=dispatch_lock)
    dispatcher = PeriodicTask(config.dispatch_interval_seconds, worker.run_tick, name="dispatch")

    return Services(
        store=store,
        inbound=inbound,
        worker=worker,
        dispatcher=dispatcher,
        event_bus=event_bus,
        config=config,
    )


def create_app(services: Services, run_dispatcher: bool = True) -> FastAPI:
    """FastAPI app exposing the inbound endpoint and job routes."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if run_dispatcher:
            services.dispatcher.start()
        try:
            yield
        finally:
            if services.dispatcher.running:
                services.dispatcher.stop(timeout=services.config.dispatch_interval_seconds)

    app = FastAPI(title="Scheduled Messages", lifespan=lifespan)
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    app.include_router(create_inbound_router(services.inbound), prefix="/api")
    app.include_router(create_jobs_router(services.store, services.event_bus), prefix="/api")

    return app


def build_production_services(config: SchedulerConfig | None = None) -> Services:
    """
    Wire every client from Vault secrets.

    Raises:
        ValueError / PermissionError: Vault misconfigured (fail-fast)
    """
    from clients.postgres_client import PostgresClient
    from clients.transport_client import GatewayTransport
    from clients.valkey_client import ValkeyClient
    from clients.vault_client import get_database_url, get_transport_config, get_valkey_url
    from core.services.job_store import PostgresJobStore
    from core.services.view_stats_store import ViewStatsStore

    config = config or SchedulerConfig()

    store = PostgresJobStore(PostgresClient(get_database_url()), config.max_pending)
    store.ensure_schema()

    valkey = ValkeyClient(get_valkey_url())
    transport = GatewayTransport(**get_transport_config())

    return build_services(
        store=store,
        transport=transport,
        view_stats=ViewStatsStore(valkey),
        config=config,
        dispatch_lock=DispatchLock(valkey, config.dispatch_lock_seconds),
    )


def create_production_app() -> FastAPI:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return create_app(build_production_services())
