from .settings import SystemSetting, SystemSettingsRepository, SystemSettingsService

__all__ = ["SystemSetting", "SystemSettingsRepository", "SystemSettingsService"]
