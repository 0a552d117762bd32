from attendance_engine.services.cache.roster_cache import RosterCache

__all__ = ["RosterCache"]
