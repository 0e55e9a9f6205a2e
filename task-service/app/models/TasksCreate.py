from typing import Optional
from pydantic import BaseModel, ConfigDict, StrictStr


class TaskCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: Optional[StrictStr] = None
    description: Optional[StrictStr] = None
    status: Optional[StrictStr] = None
