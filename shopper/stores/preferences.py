"""
App preferences

Theme, language, delivery location and device settings, plus the transient
UI state (connectivity, notifications, banners). Only theme, language,
selected address and settings survive a restart.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaError

from grama_common.errors import ValidationError

from ..persistence import KeyValueStorage
from .base import PersistentStore

STORAGE_KEY = "grama-app-storage"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    AUTO = "auto"


class Language(str, Enum):
    HINDI = "hindi"
    ENGLISH = "english"


class NotificationType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Coordinates(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class NotificationAction(BaseModel):
    label: str
    url: str


class AppNotification(BaseModel):
    """In-app notification"""
    id: str
    type: NotificationType = NotificationType.INFO
    title: str
    message: str
    action: Optional[NotificationAction] = None
    created_at: datetime
    expires_at: Optional[datetime] = None


class BannerActionType(str, Enum):
    URL = "url"
    ROUTE = "route"
    MODAL = "modal"


class BannerAction(BaseModel):
    type: BannerActionType
    value: str
    label: str


class AppBanner(BaseModel):
    """Promotional banner, shown between start_date and end_date"""
    id: str
    title: str
    description: str = ""
    image: str = ""
    action: Optional[BannerAction] = None
    start_date: datetime
    end_date: datetime
    is_active: bool = True
    priority: int = 0

    def is_live(self, now: datetime) -> bool:
        return self.is_active and self.start_date <= now <= self.end_date


class AppSettings(BaseModel):
    """Device settings"""
    push_notifications: bool = True
    location_services: bool = True
    biometric_auth: bool = False
    auto_sync: bool = True

    model_config = ConfigDict(extra="forbid")


class PreferencesSnapshot(BaseModel):
    """Persisted part of the app state"""
    theme: Theme = Theme.LIGHT
    language: Language = Language.ENGLISH
    selected_address: Optional[str] = None
    settings: AppSettings = Field(default_factory=AppSettings)


class PreferencesStore(PersistentStore[PreferencesSnapshot]):
    """UI and device preferences of the shopper"""

    storage_key = STORAGE_KEY
    snapshot_model = PreferencesSnapshot

    def __init__(self, storage: KeyValueStorage, clock: Optional[Callable[[], datetime]] = None):
        super().__init__(storage)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self.theme = Theme.LIGHT
        self.language = Language.ENGLISH
        self.is_online = True
        self.current_location: Optional[Coordinates] = None
        self.selected_address: Optional[str] = None
        self.notifications: list[AppNotification] = []
        self.banners: list[AppBanner] = []
        self.settings = AppSettings()

    # ==================== Persistence ====================

    def snapshot(self) -> PreferencesSnapshot:
        return PreferencesSnapshot(
            theme=self.theme,
            language=self.language,
            selected_address=self.selected_address,
            settings=self.settings.model_copy(),
        )

    def _apply_snapshot(self, snapshot: PreferencesSnapshot) -> None:
        self.theme = snapshot.theme
        self.language = snapshot.language
        self.selected_address = snapshot.selected_address
        self.settings = snapshot.settings.model_copy()

    # ==================== Preferences ====================

    def set_theme(self, theme: Theme | str) -> None:
        self.theme = self._coerce(Theme, theme, "theme")
        self._changed()

    def set_language(self, language: Language | str) -> None:
        self.language = self._coerce(Language, language, "language")
        self._changed()

    def set_selected_address(self, address_id: Optional[str]) -> None:
        self.selected_address = address_id
        self._changed()

    def update_settings(self, **changes) -> AppSettings:
        """
        Shallow-merge changes into the device settings.

        Raises:
            ValidationError: unknown setting or a non-boolean value
        """
        try:
            self.settings = AppSettings.model_validate({**self.settings.model_dump(), **changes})
        except SchemaError as e:
            raise ValidationError(f"Invalid settings: {e.errors()[0]['msg']}") from e
        self._changed()
        return self.settings

    # ==================== Session state ====================

    def set_online_status(self, is_online: bool) -> None:
        self.is_online = is_online
        self._changed(persist=False)

    def set_current_location(self, location: Optional[Coordinates | dict]) -> None:
        if isinstance(location, dict):
            try:
                location = Coordinates.model_validate(location)
            except SchemaError as e:
                raise ValidationError("Invalid coordinates") from e
        self.current_location = location
        self._changed(persist=False)

    def add_notification(
        self,
        title: str,
        message: str,
        type: NotificationType | str = NotificationType.INFO,
        action: Optional[NotificationAction] = None,
        expires_at: Optional[datetime] = None,
    ) -> AppNotification:
        notification = AppNotification(
            id=uuid.uuid4().hex,
            type=self._coerce(NotificationType, type, "notification type"),
            title=title,
            message=message,
            action=action,
            created_at=self._clock(),
            expires_at=expires_at,
        )
        self.notifications.append(notification)
        self._changed(persist=False)
        return notification

    def remove_notification(self, notification_id: str) -> None:
        self.notifications = [n for n in self.notifications if n.id != notification_id]
        self._changed(persist=False)

    def clear_notifications(self) -> None:
        self.notifications = []
        self._changed(persist=False)

    def set_banners(self, banners: list[AppBanner]) -> None:
        self.banners = list(banners)
        self._changed(persist=False)

    def active_banners(self, now: Optional[datetime] = None) -> list[AppBanner]:
        """Banners that are switched on and inside their window, highest priority first"""
        now = now or self._clock()
        live = [banner for banner in self.banners if banner.is_live(now)]
        return sorted(live, key=lambda banner: banner.priority, reverse=True)

    @staticmethod
    def _coerce(enum_cls, value, label: str):
        try:
            return enum_cls(value)
        except ValueError as e:
            raise ValidationError(f"Unknown {label}: {value}") from e


def create_preferences_store(
    storage: KeyValueStorage,
    initial_state: Optional[PreferencesSnapshot] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> PreferencesStore:
    """Create a preferences store, restored from storage unless an initial state is given"""
    store = PreferencesStore(storage, clock=clock)
    store.restore(initial_state)
    return store
