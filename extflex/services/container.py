"""
Service Container - Dependency Injection Container

Simple DI container for managing service instances and their dependencies.
Uses lazy loading to only instantiate services when first accessed. Every
service shares the container's store and clock, so one container is one
user's engine.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

from extflex.storage.base import KeyValueStore
from extflex.utils.datetime_helpers import Clock

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """
    Simple dependency injection container for services.

    Services are lazy-loaded on first access via properties.
    Infrastructure dependencies (store, clock) are injected.
    """

    # Infrastructure dependencies (injected)
    store: KeyValueStore
    clock: Optional[Clock] = None  # defaults to now_utc inside each service

    # Services (lazy-loaded via properties)
    _streak_service: Optional[object] = field(default=None, init=False, repr=False)
    _progression_service: Optional[object] = field(default=None, init=False, repr=False)
    _personal_best_service: Optional[object] = field(default=None, init=False, repr=False)
    _exercise_log_service: Optional[object] = field(default=None, init=False, repr=False)
    _data_transfer_service: Optional[object] = field(default=None, init=False, repr=False)

    @property
    def streak_service(self):
        """Get StreakService instance (lazy-loaded)"""
        if self._streak_service is None:
            from extflex.services.streak_service import StreakService
            self._streak_service = StreakService(self.store, clock=self.clock)
            logger.debug("StreakService instantiated")
        return self._streak_service

    @property
    def progression_service(self):
        """Get ProgressionService instance (lazy-loaded)"""
        if self._progression_service is None:
            from extflex.services.progression_service import ProgressionService
            self._progression_service = ProgressionService(
                self.store,
                clock=self.clock,
                streak_reader=self.streak_service.get_current_streak,
            )
            logger.debug("ProgressionService instantiated")
        return self._progression_service

    @property
    def personal_best_service(self):
        """Get PersonalBestService instance (lazy-loaded)"""
        if self._personal_best_service is None:
            from extflex.services.personal_best_service import PersonalBestService
            self._personal_best_service = PersonalBestService(self.store, clock=self.clock)
            logger.debug("PersonalBestService instantiated")
        return self._personal_best_service

    @property
    def exercise_log_service(self):
        """Get ExerciseLogService instance (lazy-loaded)"""
        if self._exercise_log_service is None:
            from extflex.services.exercise_log_service import ExerciseLogService
            self._exercise_log_service = ExerciseLogService(
                self.store,
                progression_service=self.progression_service,
                streak_service=self.streak_service,
                personal_best_service=self.personal_best_service,
                clock=self.clock,
            )
            logger.debug("ExerciseLogService instantiated")
        return self._exercise_log_service

    @property
    def data_transfer_service(self):
        """Get DataTransferService instance (lazy-loaded)"""
        if self._data_transfer_service is None:
            from extflex.services.data_transfer_service import DataTransferService
            self._data_transfer_service = DataTransferService(self.store, clock=self.clock)
            logger.debug("DataTransferService instantiated")
        return self._data_transfer_service
