from __future__ import annotations

import re
from datetime import date

from pydantic import BaseModel, field_validator

from field_billing.core.application.dtos.record_dtos import parse_date

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class VisitProposalInput(BaseModel):
    client_document: str
    client_name: str
    scheduled_date: date | None = None
    scheduled_time: str | None = None

    @field_validator("scheduled_date", mode="before")
    @classmethod
    def _date(cls, v):
        return parse_date(v)

    @field_validator("scheduled_time", mode="before")
    @classmethod
    def _time(cls, v):
        if v is None or not str(v).strip():
            return None
        s = str(v).strip()[:5]
        if not _TIME_RE.match(s):
            raise ValueError(f"horário inválido: {v!r}")
        return s
