from portfolio.client.api import ApiError, PortfolioClient
from portfolio.client.cache import QueryCache
from portfolio.client.state import AppState, StateStore

__all__ = ['ApiError', 'AppState', 'PortfolioClient', 'QueryCache', 'StateStore']
