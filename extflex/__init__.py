"""Ext & Flex progression engine: XP, levels, unlocks, achievements, streaks and personal bests"""

__version__ = "0.4.0"
