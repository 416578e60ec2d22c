from .queue_page import QueuePage
from .settings_page import SettingsPage

__all__ = ["QueuePage", "SettingsPage"]
