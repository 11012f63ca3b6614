from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from tableside.domain.models import Notification

class INotificationRepository(ABC):
    @abstractmethod
    def list_notifications(self, is_read: Optional[bool] = None) -> List[Notification]:
        pass

    @abstractmethod
    def mark_read(self, notification_id: int) -> Optional[Notification]:
        pass

    @abstractmethod
    def mark_all_read(self) -> int:
        pass

    @abstractmethod
    def delete_read_before(self, cutoff: datetime) -> int:
        pass
