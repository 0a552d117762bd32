from attendance_engine.services.roster.roster_service import RosterService

__all__ = ["RosterService"]
