from .recording import Recording
from .stream_store import StreamStore

__all__ = ["Recording", "StreamStore"]
