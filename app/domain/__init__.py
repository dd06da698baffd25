from app.domain.analysis_operations import analysis_ops
from app.domain.analysis_progress_operations import analysis_progress_ops
from app.domain.progress_operations import progress_ops
from app.domain.roadmap_operations import roadmap_ops

__all__ = [
    "analysis_ops",
    "roadmap_ops",
    "progress_ops",
    "analysis_progress_ops",
]
