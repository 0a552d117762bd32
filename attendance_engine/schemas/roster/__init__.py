from attendance_engine.schemas.roster.roster import CourseSummary, OptionSets, StudentDetails

__all__ = ["CourseSummary", "OptionSets", "StudentDetails"]
