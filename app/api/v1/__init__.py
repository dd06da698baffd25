from app.api.v1 import analysis, roadmap

__all__ = [
    "analysis",
    "roadmap",
]
