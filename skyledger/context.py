"""
Per-process tracker context.

Holds every collaborator a run needs. Created once at process start,
used for the single run, then disposed.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx
from sqlalchemy.ext.asyncio import AsyncEngine

from skyledger.clients.profile import ProfileClient
from skyledger.clients.telegram import TelegramNotifier
from skyledger.config import Settings
from skyledger.db.database import create_engine, create_session_factory
from skyledger.db.store import DocumentStore

USER_AGENT = "skyledger/1.0"


@dataclass
class TrackerContext:
    settings: Settings
    http_client: httpx.AsyncClient
    engine: AsyncEngine
    store: DocumentStore
    profiles: ProfileClient
    notifier: TelegramNotifier

    @classmethod
    def build(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient,
        engine: AsyncEngine,
    ) -> "TrackerContext":
        """Wire collaborators around an existing HTTP client and engine."""
        policy = settings.retry_policy()
        return cls(
            settings=settings,
            http_client=http_client,
            engine=engine,
            store=DocumentStore(
                create_session_factory(engine),
                collection=settings.document_collection,
                retry_policy=policy,
            ),
            profiles=ProfileClient(
                http_client,
                base_url=settings.profile_api_url,
                retry_policy=policy,
            ),
            notifier=TelegramNotifier(
                http_client,
                bot_token=settings.bot_token,
                chat_id=settings.chat_id,
                retry_policy=policy,
                api_url=settings.telegram_api_url,
                parse_mode=settings.telegram_parse_mode,
            ),
        )

    @classmethod
    @asynccontextmanager
    async def open(cls, settings: Settings) -> AsyncIterator["TrackerContext"]:
        """
        Create the context and dispose of it on exit.

        Usage:
            async with TrackerContext.open(settings) as context:
                await run_tracker(context)
        """
        engine = create_engine(settings)
        try:
            async with httpx.AsyncClient(
                headers={"User-Agent": USER_AGENT},
                follow_redirects=True,
                timeout=settings.http_timeout,
            ) as client:
                yield cls.build(settings, client, engine)
        finally:
            await engine.dispose()
