# taskflow/services/attachments.py
import logging
from typing import BinaryIO, List, Optional

from sqlalchemy.orm import Session

from taskflow.models.task import Task, TaskAttachment
from taskflow.models.user import User
from taskflow.services.file_storage import FileStorageService
from taskflow.services.task_store import TaskStore
from taskflow.utils.auth import Identity
from taskflow.utils.errors import NotFoundError, UnauthorizedError, ValidationError

logger = logging.getLogger(__name__)

# Matches TaskAttachment.file_name
MAX_FILE_NAME_LENGTH = 255


class AttachmentManager:
    """Binds uploaded files to tasks and removes them again"""

    def __init__(self, db: Session, storage: FileStorageService):
        self.db = db
        self.storage = storage
        self.tasks = TaskStore(db)

    def upload(self, task_id: int, filename: Optional[str], source: Optional[BinaryIO], identity: Identity) -> TaskAttachment:
        """
        Store a file and append it to the task's attachments

        The task is looked up before anything touches the disk, so a
        missing task never leaves a file behind.
        """
        if source is None or not filename:
            raise ValidationError("No file received")

        # Tokens outlive their user; the uploader row must still exist
        if self.db.get(User, identity.id) is None:
            raise UnauthorizedError("User no longer exists")

        task = self.tasks.get_task(task_id)

        stored_name, file_size = self.storage.save_file(source, filename)
        file_path = self.storage.web_path(stored_name)

        try:
            attachment = TaskAttachment(
                file_name=filename[:MAX_FILE_NAME_LENGTH],
                file_path=file_path,
                uploaded_by_id=identity.id,
            )
            task.attachments.append(attachment)
            self.db.commit()
            self.db.refresh(attachment)
        except Exception:
            self.db.rollback()
            self.storage.delete_file(file_path)
            raise

        logger.info(
            "User %s uploaded %s to task %s as %s (%d bytes)",
            identity.id, filename, task_id, stored_name, file_size,
        )
        return attachment

    def list(self, task_id: int) -> List[TaskAttachment]:
        return list(self.tasks.get_task(task_id).attachments)

    @staticmethod
    def _find(task: Task, filename: str) -> Optional[TaskAttachment]:
        for attachment in task.attachments:
            if attachment.id == filename or attachment.stored_name == filename:
                return attachment
        return None

    def delete(self, task_id: int, filename: str) -> None:
        """Remove one attachment, matched by id or exact stored filename"""
        task = self.tasks.get_task(task_id)

        attachment = self._find(task, filename)
        if attachment is None:
            raise NotFoundError("File not found")

        # Disk cleanup is best-effort; the record goes regardless
        self.storage.delete_file(attachment.file_path)

        task.attachments.remove(attachment)
        self.db.commit()
        logger.info("Deleted attachment %s from task %s", attachment.id, task_id)
