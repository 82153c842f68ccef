# taskflow/schemas/task.py
from pydantic import AliasChoices, BaseModel, BeforeValidator, Field
from datetime import datetime
from typing import Annotated, Optional, List

from taskflow.models.task import TaskStatus, TaskPriority
from taskflow.schemas.user import UserBrief, UserSummary

def _blank_to_none(value):
    if isinstance(value, str) and value.strip() == "":
        return None
    return value

# Form-style clients send "" for "not set"
OptionalUserId = Annotated[Optional[int], BeforeValidator(_blank_to_none)]
OptionalDeadline = Annotated[Optional[datetime], BeforeValidator(_blank_to_none)]
OptionalPriority = Annotated[Optional[TaskPriority], BeforeValidator(_blank_to_none)]
OptionalStatus = Annotated[Optional[TaskStatus], BeforeValidator(_blank_to_none)]

class TaskCreate(BaseModel):
    # title is checked by the task store so a missing title reads "Title is required"
    title: Optional[str] = None
    description: Optional[str] = None
    assigned_to: OptionalUserId = Field(None, validation_alias=AliasChoices("assignedTo", "assigned_to"))
    deadline: OptionalDeadline = None
    priority: OptionalPriority = None

class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    assigned_to: OptionalUserId = Field(None, validation_alias=AliasChoices("assignedTo", "assigned_to"))
    deadline: OptionalDeadline = None
    priority: OptionalPriority = None
    status: OptionalStatus = None

class TaskStatusUpdate(BaseModel):
    # Empty or missing status keeps the current one
    status: OptionalStatus = None

class AttachmentOut(BaseModel):
    id: str
    file_name: str = Field(..., serialization_alias="fileName")
    file_path: str = Field(..., serialization_alias="filePath")
    uploaded_by: Optional[UserBrief] = Field(None, serialization_alias="uploadedBy")
    uploaded_at: datetime = Field(..., serialization_alias="uploadedAt")

    model_config = {
        "from_attributes": True
    }

class UploadOut(BaseModel):
    message: str
    attachment: AttachmentOut

class TaskOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    assigned_to: Optional[UserBrief] = Field(None, serialization_alias="assignedTo")
    deadline: Optional[datetime] = None
    priority: TaskPriority
    status: TaskStatus
    attachments: List[AttachmentOut] = []
    created_at: datetime = Field(..., serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(None, serialization_alias="updatedAt")

    model_config = {
        "from_attributes": True
    }

class TaskAnalyticsOut(TaskOut):
    assigned_to: Optional[UserSummary] = Field(None, serialization_alias="assignedTo")
