# digishop/models/base.py
from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict

class Record(BaseModel):
    """Row keyed by a backend-generated uuid"""
    id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class TimeStampedModel(Record):
    """Row that also tracks its last update"""
    updated_at: Optional[datetime] = None
