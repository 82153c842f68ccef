from .user import User, Role
from .task import Task, TaskAttachment, TaskStatus, TaskPriority
