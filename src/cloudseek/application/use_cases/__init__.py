from .hot_search import HotSearchService
from .search import AssembledSearch, SearchUseCase

__all__ = ["AssembledSearch", "HotSearchService", "SearchUseCase"]
