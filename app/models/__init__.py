# Base.metadata에 모든 테이블을 등록하기 위한 import
from app.models.user import User, Role  # noqa: F401
from app.models.dataset import Dataset  # noqa: F401
from app.models.member import Member  # noqa: F401
from app.models.activity_log import ActivityLog, ActivityAction  # noqa: F401
from app.models.upload_history import UploadHistory  # noqa: F401
