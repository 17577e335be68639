"""Shared API schemas."""

from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel

from ..models.domain import Notice


class NoticeModel(BaseModel):
    level: Literal["info", "warning", "error"]
    message: str

    @classmethod
    def from_notice(cls, notice: Notice) -> "NoticeModel":
        return cls(level=notice.level, message=notice.message)


def notices_to_models(notices: List[Notice]) -> List[NoticeModel]:
    return [NoticeModel.from_notice(notice) for notice in notices]
