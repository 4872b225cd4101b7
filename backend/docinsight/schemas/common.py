from enum import Enum

class UploadStatus(str, Enum):
    pending = "pending"
    completed = "completed"
    failed = "failed"

class ProcessingStatus(str, Enum):
    processing = "processing"
    completed = "completed"
    failed = "failed"

class Severity(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"

class Priority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
