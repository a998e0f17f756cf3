"""Dependency injection container using dependency-injector library."""
from dependency_injector import containers, providers

from src.app.config import get_settings
from src.shared.database.database import Database, DatabaseSettings
from src.shared.database.unit_of_work import UnitOfWork
from src.shared.database.entity_mapper import EntityMapper

from src.app.infrastructure.mappers.client_mapper import ClientMapper
from src.app.infrastructure.mappers.user_mapper import UserMapper, UserClaimMapper, UserRoleMapper

from src.app.infrastructure.client_repository import ClientRepository
from src.app.infrastructure.user_repository import (
    UserRepository,
    UserClaimRepository,
    UserRoleRepository,
)

from src.app.core.services.client_service import ClientService
from src.app.core.services.identity_service import IdentityService
from src.app.core.services.password_hasher import PasswordHasher
from src.app.core.services.token_service import TokenService

from src.app.core.domain.models import Client, User, UserClaim, UserRole


API_MODULES = [
    "src.app.api.dependencies",
    "src.app.api.v1.accounts",
    "src.app.api.v1.clients",
]


def create_entity_mapper(
    client_mapper: ClientMapper,
    user_mapper: UserMapper,
    user_claim_mapper: UserClaimMapper,
    user_role_mapper: UserRoleMapper,
) -> EntityMapper:
    """Factory function to create EntityMapper with proper mappings."""
    return EntityMapper(
        entity_mappings={
            Client: client_mapper.to_entity,
            User: user_mapper.to_entity,
            UserClaim: user_claim_mapper.to_entity,
            UserRole: user_role_mapper.to_entity,
        }
    )


class Container(containers.DeclarativeContainer):
    """Main application dependency injection container."""

    wiring_config = containers.WiringConfiguration(modules=API_MODULES)

    # =========================================================================
    # CONFIGURATION - Singleton (loaded once, cached)
    # =========================================================================
    config = providers.Singleton(get_settings)

    # =========================================================================
    # SINGLETONS - Stateless Mappers (reusable across all requests)
    # =========================================================================
    client_mapper = providers.Singleton(ClientMapper)
    user_mapper = providers.Singleton(UserMapper)
    user_claim_mapper = providers.Singleton(UserClaimMapper)
    user_role_mapper = providers.Singleton(UserRoleMapper)

    entity_mapper = providers.Singleton(
        create_entity_mapper,
        client_mapper=client_mapper,
        user_mapper=user_mapper,
        user_claim_mapper=user_claim_mapper,
        user_role_mapper=user_role_mapper,
    )

    # =========================================================================
    # SINGLETONS - Security primitives
    # =========================================================================
    password_hasher = providers.Singleton(PasswordHasher)

    token_service = providers.Singleton(
        TokenService,
        settings=config.provided.jwt,
    )

    # =========================================================================
    # SINGLETON - Database (shared connection pool)
    # =========================================================================
    database_settings = providers.Singleton(
        DatabaseSettings,
        db_url=config.provided.database_url,
    )

    database = providers.Singleton(
        Database,
        db_settings=database_settings,
    )

    # =========================================================================
    # FACTORIES - Repositories (per-request, share database singleton)
    # =========================================================================
    client_repository = providers.Factory(
        ClientRepository,
        db=database,
        mapper=client_mapper,
    )

    user_repository = providers.Factory(
        UserRepository,
        db=database,
        mapper=user_mapper,
    )

    user_claim_repository = providers.Factory(
        UserClaimRepository,
        db=database,
        mapper=user_claim_mapper,
    )

    user_role_repository = providers.Factory(
        UserRoleRepository,
        db=database,
        mapper=user_role_mapper,
    )

    # =========================================================================
    # FACTORY - Unit of Work (per-request)
    # =========================================================================
    unit_of_work = providers.Factory(
        UnitOfWork,
        db=database,
        entity_mapper=entity_mapper,
    )

    # =========================================================================
    # FACTORIES - Services
    # =========================================================================
    client_service = providers.Factory(
        ClientService,
        repository=client_repository,
        unit_of_work=unit_of_work,
    )

    identity_service = providers.Factory(
        IdentityService,
        user_repository=user_repository,
        claim_repository=user_claim_repository,
        role_repository=user_role_repository,
        unit_of_work=unit_of_work,
        password_hasher=password_hasher,
        password_settings=config.provided.password,
        lockout_settings=config.provided.lockout,
        sign_in_settings=config.provided.sign_in,
    )
