from .listeners import ListenerList

__all__ = ["ListenerList"]
