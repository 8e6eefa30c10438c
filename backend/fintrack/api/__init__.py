"""API router package."""
from fintrack.api.performance import router as performance_router
from fintrack.api.portfolio import router as portfolio_router
from fintrack.api.imports import router as imports_router
from fintrack.api.dividends import router as dividends_router

__all__ = [
    "performance_router",
    "portfolio_router",
    "imports_router",
    "dividends_router",
]
