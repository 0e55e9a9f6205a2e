from app.models.TaskStatus import TaskStatus, STATUS_VALUES
from app.models.Task import Task
from app.models.TasksCreate import TaskCreate
from app.models.TaskUpdate import TaskUpdate

__all__ = ["TaskStatus", "STATUS_VALUES", "Task", "TaskCreate", "TaskUpdate"]
