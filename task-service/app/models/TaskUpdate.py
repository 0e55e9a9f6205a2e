from typing import Optional
from pydantic import BaseModel, ConfigDict, StrictStr


class TaskUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: Optional[StrictStr] = None
    description: Optional[StrictStr] = None
    status: Optional[StrictStr] = None

    def provided(self) -> dict:
        return {k: v for k, v in self.model_dump().items() if v is not None}
