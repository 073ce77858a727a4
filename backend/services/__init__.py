from .orchestrator import ClipOrchestrator, ClipRenderResult, build_orchestrator
from .settings import Settings
from .store import InMemoryClipStore, clips

__all__ = [
    "ClipOrchestrator",
    "ClipRenderResult",
    "build_orchestrator",
    "Settings",
    "InMemoryClipStore",
    "clips",
]
