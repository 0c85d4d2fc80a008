from swimlane.core.config import Settings, get_settings
