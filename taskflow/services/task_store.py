# taskflow/services/task_store.py
"""
Persistence and access rules for tasks.

Visibility and status updates follow the caller's role:

- ADMIN and MANAGER: see and change every task
- EMPLOYEE: sees only tasks assigned to them and may only change their status
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from taskflow.models.task import Task, TaskAttachment, TaskPriority, TaskStatus
from taskflow.models.user import User, Role
from taskflow.services.file_storage import FileStorageService
from taskflow.utils.auth import Identity
from taskflow.utils.errors import ForbiddenError, NotFoundError, ValidationError
from taskflow.utils.permissions import Permission, has_permission

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "description", "assigned_to", "deadline", "priority", "status")


class TaskStore:
    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Task).options(
            joinedload(Task.assigned_to),
            selectinload(Task.attachments).joinedload(TaskAttachment.uploaded_by),
        )

    def get_task(self, task_id: int) -> Task:
        task = self._query().filter(Task.id == task_id).first()
        if not task:
            raise NotFoundError("Task not found")
        return task

    def _resolve_assignee(self, user_id: int) -> User:
        """Tasks may only be assigned to existing Employees"""
        assignee = self.db.query(User).filter(User.id == user_id).first()
        if not assignee or assignee.role != Role.EMPLOYEE:
            raise ValidationError("Assignee must be an Employee")
        return assignee

    @staticmethod
    def _clean_title(title: Optional[str]) -> str:
        if title is None or not title.strip():
            raise ValidationError("Title is required")
        return title.strip()

    def create_task(
        self,
        title: Optional[str],
        description: Optional[str] = None,
        assigned_to: Optional[int] = None,
        deadline: Optional[datetime] = None,
        priority: Optional[TaskPriority] = None,
    ) -> Task:
        task = Task(
            title=self._clean_title(title),
            description=description,
            assigned_to=self._resolve_assignee(assigned_to) if assigned_to is not None else None,
            deadline=deadline,
            priority=priority or TaskPriority.MEDIUM,
            status=TaskStatus.PENDING,
        )
        self.db.add(task)
        self.db.commit()

        logger.info("Created task %s (assigned to %s)", task.id, task.assigned_to_id)
        return self.get_task(task.id)

    def list_tasks(self, identity: Identity) -> List[Task]:
        """Tasks visible to ``identity``, newest first"""
        query = self._query()
        if not has_permission(identity.role, Permission.VIEW_ALL_TASKS):
            query = query.filter(Task.assigned_to_id == identity.id)
        return query.order_by(Task.created_at.desc(), Task.id.desc()).all()

    def list_all(self) -> List[Task]:
        return self._query().order_by(Task.created_at.desc(), Task.id.desc()).all()

    def update_task(self, task_id: int, fields: Dict[str, Any]) -> Task:
        """
        Apply the supplied ``fields``; absent keys are left untouched

        ``None`` clears the optional fields (description, assignee, deadline).
        Priority and status are never empty, so ``None`` keeps their current
        value, the same as an empty status on the status endpoint. A ``None``
        title is rejected like an empty one.
        """
        task = self.get_task(task_id)

        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown task fields: {', '.join(sorted(unknown))}")

        if "title" in fields:
            task.title = self._clean_title(fields["title"])
        if "description" in fields:
            task.description = fields["description"]
        if "assigned_to" in fields:
            assigned_to = fields["assigned_to"]
            task.assigned_to = self._resolve_assignee(assigned_to) if assigned_to is not None else None
        if "deadline" in fields:
            task.deadline = fields["deadline"]
        if fields.get("priority") is not None:
            task.priority = TaskPriority(fields["priority"])
        if fields.get("status") is not None:
            task.status = TaskStatus(fields["status"])

        self.db.commit()
        logger.info("Updated task %s: %s", task_id, ", ".join(sorted(fields)) or "no changes")
        return self.get_task(task_id)

    def update_task_status(self, task_id: int, status: Optional[TaskStatus], identity: Identity) -> Task:
        task = self.get_task(task_id)

        if not has_permission(identity.role, Permission.UPDATE_ANY_TASK_STATUS):
            if task.assigned_to_id is None or task.assigned_to_id != identity.id:
                logger.warning("User %s may not change status of task %s", identity.id, task_id)
                raise ForbiddenError("Not allowed")

        if status is not None:
            task.status = TaskStatus(status)
        self.db.commit()

        logger.info("Task %s status is now %s", task_id, task.status.value)
        return self.get_task(task_id)

    def delete_task(self, task_id: int, storage: FileStorageService) -> None:
        """Delete a task together with its attachment records and files"""
        task = self.get_task(task_id)
        file_paths = [attachment.file_path for attachment in task.attachments]

        self.db.delete(task)
        self.db.commit()

        # Files go only once the rows are gone; a failed unlink is left to the orphan sweep
        for file_path in file_paths:
            storage.delete_file(file_path)
        logger.info("Deleted task %s and %d attachment(s)", task_id, len(file_paths))
