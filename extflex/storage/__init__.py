"""Key-value stores and per-record storages"""

from extflex.storage.base import KeyValueStore, StorageChange
from extflex.storage.exercise_storage import ExerciseStorage
from extflex.storage.json_file_store import JsonFileStore
from extflex.storage.memory_store import InMemoryStore
from extflex.storage.pb_storage import PersonalBestStorage
from extflex.storage.progression_storage import ProgressionStorage
from extflex.storage.streak_storage import StreakStorage

__all__ = [
    'KeyValueStore',
    'StorageChange',
    'InMemoryStore',
    'JsonFileStore',
    'ExerciseStorage',
    'PersonalBestStorage',
    'ProgressionStorage',
    'StreakStorage',
]
