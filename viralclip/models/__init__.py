# Models module
from viralclip.models.clip import Clip, ClipStatus
from viralclip.models.posting_job import PostingJob, PostingJobStatus
from viralclip.models.setting import AutomationSettingRow
from viralclip.models.video import Video, VideoStatus, ProcessingRun, ProcessingRunStatus

__all__ = [
    "Clip",
    "ClipStatus",
    "PostingJob",
    "PostingJobStatus",
    "AutomationSettingRow",
    "Video",
    "VideoStatus",
    "ProcessingRun",
    "ProcessingRunStatus",
]
