# Routes package
from .admin import router as admin_router
from .auth import router as auth_router
from .clients import router as clients_router
from .customers import router as customers_router
from .leads import router as leads_router
from .review_requests import router as review_requests_router
from .reviews import router as reviews_router
from .voice import router as voice_router

__all__ = [
    'admin_router', 'auth_router', 'clients_router', 'customers_router',
    'leads_router', 'review_requests_router', 'reviews_router', 'voice_router',
]
