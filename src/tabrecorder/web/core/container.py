"""Dependency injection container for the tabrecorder application."""

from datetime import timedelta

from dependency_injector import containers, providers

from tabrecorder.config import TabRecorderConfig
from tabrecorder.recordings.catalog import CatalogStore
from tabrecorder.recordings.retention import RetentionScheduler
from tabrecorder.render.pipeline import RenderPipeline
from tabrecorder.render.transcoder import Transcoder
from tabrecorder.system.file_manager import FileManager
from tabrecorder.system.path_resolver import PathResolver
from tabrecorder.web.core.config import get_config


def create_catalog_store(
    path_resolver: PathResolver, file_manager: FileManager, config: TabRecorderConfig
) -> CatalogStore:
    """Create the catalog with the configured retention window."""
    return CatalogStore(
        path_resolver,
        file_manager,
        retention=timedelta(days=config.retention.retention_days),
    )


def create_transcoder(config: TabRecorderConfig) -> Transcoder:
    """Create the ffmpeg runner from render settings."""
    return Transcoder(
        ffmpeg_path=config.render.ffmpeg_path,
        timeout_seconds=config.render.encode_timeout_seconds,
        max_concurrent=config.render.max_concurrent_encodes,
    )


def create_retention_scheduler(
    catalog: CatalogStore, config: TabRecorderConfig
) -> RetentionScheduler:
    """Create the expiry sweeper from retention settings."""
    return RetentionScheduler(
        catalog,
        interval_seconds=config.retention.sweep_interval_seconds,
        sweep_on_startup=config.retention.sweep_on_startup,
    )


class Container(containers.DeclarativeContainer):
    """Application dependency injection container.

    Every service is a singleton: the catalog and the scheduler must be
    shared so that the in-flight reservations seen by the sweeper are the
    ones made by the render pipeline.
    """

    # Core infrastructure services - singletons
    path_resolver = providers.Singleton(PathResolver)

    config = providers.Singleton(
        get_config,
        path_resolver=path_resolver,
    )

    file_manager = providers.Singleton(
        FileManager,
        path_resolver=path_resolver,
    )

    # Recording services
    catalog_store = providers.Singleton(
        create_catalog_store,
        path_resolver=path_resolver,
        file_manager=file_manager,
        config=config,
    )

    transcoder = providers.Singleton(
        create_transcoder,
        config=config,
    )

    render_pipeline = providers.Singleton(
        RenderPipeline,
        catalog=catalog_store,
        transcoder=transcoder,
    )

    retention_scheduler = providers.Singleton(
        create_retention_scheduler,
        catalog=catalog_store,
        config=config,
    )
