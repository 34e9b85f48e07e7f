from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

NotificationKind = Literal["error", "success"]


class Notification(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: NotificationKind
    message: str
