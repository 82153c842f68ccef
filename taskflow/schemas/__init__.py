from .user import UserCreate, UserLogin, RoleUpdate, UserBrief, UserSummary, UserOut, RegisterOut, MessageOut
from .tokens import LoginUser, Token
from .task import TaskCreate, TaskUpdate, TaskStatusUpdate, AttachmentOut, UploadOut, TaskOut, TaskAnalyticsOut
