from enum import Enum

class JobType(str, Enum):
    DELETE_FILE = "delete_file"
    COPY_FILE = "copy_file"
    COPY_SECTION = "copy_section"
    DELETE_SECTION = "delete_section"
    APPEND_FILE = "append_file"
    APPEND_SECTION = "append_section"
    REPLACE_SECTION = "replace_section"

class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
