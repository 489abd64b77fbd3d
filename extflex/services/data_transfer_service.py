"""
DataTransferService - Backup Export and Import

Export format (JSON object):
    {
        "version": 1,
        "exportedAt": ISO-8601 UTC timestamp,
        "entries": [ExerciseEntry, ...],
        "progression": ProgressionData,
        "streak": StreakData,
        "personalBests": {exercise_id: ExercisePersonalBests}
    }

Import accepts any subset of the four data sections (an entries-only file
from older versions works). Each record is validated on its own and invalid
ones are skipped and counted.
"""

import json
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from extflex.exceptions import ImportDataError
from extflex.models.exercise import ImportSummary
from extflex.models.streak import StreakData
from extflex.storage.base import KeyValueStore
from extflex.storage.exercise_storage import ExerciseStorage, parse_entries
from extflex.storage.pb_storage import PersonalBestStorage, parse_personal_bests
from extflex.storage.progression_storage import ProgressionStorage, parse_progression
from extflex.storage.streak_storage import StreakStorage
from extflex.utils.datetime_helpers import Clock, now_utc

logger = logging.getLogger(__name__)

EXPORT_VERSION = 1

# Section name -> expected JSON container type
SECTIONS: Dict[str, type] = {
    "entries": list,
    "progression": dict,
    "streak": dict,
    "personalBests": dict,
}


class DataTransferService:
    """Service for exporting and importing all user data"""

    def __init__(self, store: KeyValueStore, clock: Optional[Clock] = None):
        self.exercise_storage = ExerciseStorage(store)
        self.progression_storage = ProgressionStorage(store)
        self.streak_storage = StreakStorage(store)
        self.pb_storage = PersonalBestStorage(store)
        self._clock = clock or now_utc
        logger.debug("DataTransferService initialized")

    async def export_data(self) -> str:
        """
        Export every record as a JSON document

        Returns:
            Pretty-printed JSON string
        """
        entries = await self.exercise_storage.get_all_entries()
        progression = await self.progression_storage.get()
        streak = await self.streak_storage.get()
        personal_bests = await self.pb_storage.get()

        document = {
            "version": EXPORT_VERSION,
            "exportedAt": self._clock().isoformat(),
            "entries": [e.to_record() for e in entries],
            "progression": progression.to_record(),
            "streak": streak.to_record(),
            "personalBests": self.pb_storage.serialize(personal_bests),
        }
        logger.info(f"Exported {len(entries)} entries")
        return json.dumps(document, indent=2, ensure_ascii=False)

    def _load_document(self, json_text: str) -> Dict[str, Any]:
        try:
            document = json.loads(json_text)
        except (TypeError, ValueError) as e:
            raise ImportDataError("not valid JSON", cause=e)

        if not isinstance(document, dict):
            raise ImportDataError("expected a JSON object")

        present = [name for name in SECTIONS if name in document]
        if not present:
            raise ImportDataError("no entries, progression, streak or personalBests section")

        for name in present:
            expected = SECTIONS[name]
            if not isinstance(document[name], expected):
                raise ImportDataError(
                    f"'{name}' must be a JSON {'array' if expected is list else 'object'}",
                    section=name,
                )
        return document

    async def import_data(self, json_text: str, merge: bool = False) -> ImportSummary:
        """
        Import a backup document

        Args:
            json_text: Document produced by export_data() (or a subset of it)
            merge: Entries only. True keeps existing entries and adds those
                with unseen ids; False replaces the log. Progression, streak
                and personal-best sections always replace the stored record
                when present.

        Returns:
            ImportSummary with per-section counts and dropped records

        Raises:
            ImportDataError: text is not a JSON object with at least one
                known section, or a section has the wrong container type
        """
        document = self._load_document(json_text)
        summary = ImportSummary()

        if "entries" in document:
            entries, dropped = parse_entries(document["entries"])
            summary.dropped += dropped
            if merge:
                existing = await self.exercise_storage.get_all_entries()
                seen = {e.id for e in existing}
                new_entries = []
                for entry in entries:
                    if entry.id not in seen:
                        seen.add(entry.id)
                        new_entries.append(entry)
                await self.exercise_storage.replace_entries(existing + new_entries)
                summary.entries_imported = len(new_entries)
            else:
                await self.exercise_storage.replace_entries(entries)
                summary.entries_imported = len(entries)

        if "progression" in document:
            progression, dropped = parse_progression(document["progression"])
            summary.dropped += dropped
            await self.progression_storage.save(progression)
            summary.exercises_imported = len(progression.exercises)
            summary.achievements_imported = len(progression.achievements)

        if "streak" in document:
            try:
                streak = StreakData.model_validate(document["streak"])
            except PydanticValidationError as e:
                logger.warning(f"Skipping invalid streak record: {e.error_count()} errors")
                summary.dropped += 1
            else:
                await self.streak_storage.save(streak)
                summary.streak_imported = True

        if "personalBests" in document:
            personal_bests, dropped = parse_personal_bests(document["personalBests"])
            summary.dropped += dropped
            await self.pb_storage.save(personal_bests)
            summary.personal_bests_imported = len(personal_bests)

        logger.info(
            f"Import complete (merge={merge}): {summary.entries_imported} entries, "
            f"{summary.exercises_imported} exercises, {summary.achievements_imported} achievements, "
            f"{summary.personal_bests_imported} PB sets, streak={summary.streak_imported}, "
            f"{summary.dropped} dropped"
        )
        return summary
