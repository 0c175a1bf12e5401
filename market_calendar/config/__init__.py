from .settings import CalendarSettings, Environment, LoggingSettings, Settings

__all__ = ["CalendarSettings", "Environment", "LoggingSettings", "Settings"]
