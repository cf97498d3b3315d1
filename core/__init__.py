from .catalog import MessageCatalog
from .config import SearchConfig
from .limiters import FileSizeLimiter, ResultLimiter
from .options import SearchOptions

__all__ = ["MessageCatalog", "SearchConfig", "SearchOptions", "FileSizeLimiter", "ResultLimiter"]
