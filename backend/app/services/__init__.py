"""Business logic services"""

from backend.app.services.auth_service import AuthService, auth_service
from backend.app.services.identity_gateway import IdentityGateway, GitHubProvider, AuthStateStream
from backend.app.services.listing_service import ListingService
from backend.app.services.profile_service import ProfileService
from backend.app.services.role_selector import RoleSelector
from backend.app.services.session_observer import SessionObserver, Navigator

__all__ = [
    'AuthService',
    'auth_service',
    'IdentityGateway',
    'GitHubProvider',
    'AuthStateStream',
    'ListingService',
    'ProfileService',
    'RoleSelector',
    'SessionObserver',
    'Navigator',
]
