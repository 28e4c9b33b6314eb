"""Application service container"""

from typing import Optional

from backend.app.core.database import create_engine, create_session_factory
from backend.app.core.logging import get_logger
from backend.app.repositories.document_store import DocumentStore, SQLAlchemyDocumentStore
from backend.app.services.auth_service import AuthService, auth_service
from backend.app.services.identity_gateway import GitHubProvider, IdentityGateway
from backend.app.services.listing_service import ListingService
from backend.app.services.profile_service import ProfileService
from backend.app.services.role_selector import DocumentIntentStore, RoleSelector
from backend.app.services.session_observer import Navigator, SessionObserver

logger = get_logger(__name__)


class Container:
    """Builds and owns the application-lifetime services"""

    def __init__(
        self,
        store: DocumentStore,
        provider: Optional[GitHubProvider] = None,
        tokens: Optional[AuthService] = None
    ):
        self.store = store
        self.tokens = tokens or auth_service
        self.provider = provider or GitHubProvider()
        self.role_selector = RoleSelector(DocumentIntentStore(store))
        self.navigator = Navigator()
        self.identity = IdentityGateway(self.provider, store, self.tokens)
        self.observer = SessionObserver(self.role_selector, self.navigator)
        self.profiles = ProfileService(store)
        self.listings = ListingService(store)

    async def start(self) -> None:
        if isinstance(self.store, SQLAlchemyDocumentStore):
            await self.store.create_schema()
        self.observer.attach(self.identity)

    async def stop(self) -> None:
        self.observer.detach()
        await self.provider.close()
        await self.store.close()


def build_default_container() -> Container:
    """Container backed by the configured database and GitHub"""
    engine = create_engine()
    store = SQLAlchemyDocumentStore(create_session_factory(engine), engine)
    return Container(store)
