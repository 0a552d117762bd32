from attendance_engine.repositories.roster.roster_repository import RosterRepository

__all__ = ["RosterRepository"]
