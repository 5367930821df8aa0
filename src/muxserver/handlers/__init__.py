from .echo import EchoHandler
from .hello import HelloHandler

__all__ = ['EchoHandler', 'HelloHandler']
