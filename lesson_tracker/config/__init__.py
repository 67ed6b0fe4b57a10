from lesson_tracker.config.settings import Settings, get_settings


__all__ = ["Settings", "get_settings"]
