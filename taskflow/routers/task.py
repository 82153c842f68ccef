# taskflow/routers/task.py
from fastapi import APIRouter, Depends, status, UploadFile, File
from sqlalchemy.orm import Session
from typing import List, Optional

from taskflow.database import get_db
from taskflow.schemas import (
    TaskCreate, TaskUpdate, TaskStatusUpdate, TaskOut, TaskAnalyticsOut,
    AttachmentOut, UploadOut, MessageOut,
)
from taskflow.services.attachments import AttachmentManager
from taskflow.services.file_storage import FileStorageService, get_file_storage
from taskflow.services.task_store import TaskStore
from taskflow.utils.auth import Identity, get_current_identity, require_permission
from taskflow.utils.permissions import Permission

router = APIRouter()

@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_permission(Permission.CREATE_TASK)),
):
    return TaskStore(db).create_task(
        title=task.title,
        description=task.description,
        assigned_to=task.assigned_to,
        deadline=task.deadline,
        priority=task.priority,
    )

@router.get("", response_model=List[TaskOut])
def get_tasks(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """Employees see the tasks assigned to them; Admins and Managers see all"""
    return TaskStore(db).list_tasks(identity)

@router.get("/analytics", response_model=List[TaskAnalyticsOut])
def get_analytics(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    return TaskStore(db).list_all()

@router.put("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    task_update: TaskUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_permission(Permission.UPDATE_TASK)),
):
    return TaskStore(db).update_task(task_id, task_update.model_dump(exclude_unset=True))

@router.patch("/{task_id}/status", response_model=TaskOut)
def update_task_status(
    task_id: int,
    status_update: TaskStatusUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """Assigned Employees, Managers and Admins may change a task's status"""
    return TaskStore(db).update_task_status(task_id, status_update.status, identity)

@router.delete("/{task_id}", response_model=MessageOut)
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    storage: FileStorageService = Depends(get_file_storage),
    identity: Identity = Depends(require_permission(Permission.DELETE_TASK)),
):
    TaskStore(db).delete_task(task_id, storage)
    return {"message": "Task deleted"}

# File Attachment Endpoints
@router.post("/{task_id}/upload", response_model=UploadOut)
def upload_file(
    task_id: int,
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: FileStorageService = Depends(get_file_storage),
    identity: Identity = Depends(get_current_identity),
):
    attachment = AttachmentManager(db, storage).upload(
        task_id,
        file.filename if file else None,
        file.file if file else None,
        identity,
    )
    return {"message": "File uploaded successfully", "attachment": attachment}

@router.get("/{task_id}/files", response_model=List[AttachmentOut])
def get_files(
    task_id: int,
    db: Session = Depends(get_db),
    storage: FileStorageService = Depends(get_file_storage),
    identity: Identity = Depends(get_current_identity),
):
    return AttachmentManager(db, storage).list(task_id)

@router.delete(
    "/{task_id}/files/{filename}",
    response_model=MessageOut,
    dependencies=[Depends(require_permission(Permission.DELETE_ATTACHMENT))],
)
def delete_file(
    task_id: int,
    filename: str,
    db: Session = Depends(get_db),
    storage: FileStorageService = Depends(get_file_storage),
):
    AttachmentManager(db, storage).delete(task_id, filename)
    return {"message": "File deleted successfully"}
