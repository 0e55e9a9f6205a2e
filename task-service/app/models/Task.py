from datetime import datetime
from pydantic import BaseModel, ConfigDict
from app.models.TaskStatus import TaskStatus


class Task(BaseModel):
    # stored documents may carry housekeeping keys; they never reach the model
    model_config = ConfigDict(extra="ignore")

    id: str
    title: str
    description: str
    status: TaskStatus
    createdAt: datetime
    updatedAt: datetime

    def public(self) -> dict:
        return self.model_dump(mode="json")
