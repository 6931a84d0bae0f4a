"""Dependency injection container for the fetal health application.

This module defines the Container class which manages all application
dependencies using dependency-injector. It provides centralized access
to services through the container instance.
"""

from dependency_injector import containers, providers
from loguru import logger

from fetal_health.core.data import CsvDatasetLoader
from fetal_health.core.pipeline import create_pipeline
from fetal_health.services import RepeatedRunner
from fetal_health.settings import FetalHealthSettings


class Container(containers.DeclarativeContainer):
    """Main dependency injection container for the application.

    Services are accessed via the container singleton instance.
    """

    # Root settings - loaded from environment/.env
    settings = providers.Singleton(FetalHealthSettings)

    # Logger - use loguru global logger
    log = providers.Object(logger)

    # --- Data ---

    dataset_loader = providers.Factory(CsvDatasetLoader)

    # --- Pipeline ---

    pipeline = providers.Factory(
        create_pipeline,
        settings=settings.provided.pipeline,
    )

    repeated_runner = providers.Factory(
        RepeatedRunner,
        pipeline=pipeline,
        settings=settings,
    )


container = Container()
