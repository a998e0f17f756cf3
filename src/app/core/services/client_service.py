import logging
from uuid import UUID, uuid4

from src.app.core.domain.models import Client
from src.app.core.services.validation import ensure_valid, validate_client
from src.shared.database.unit_of_work import UnitOfWork
from src.shared.exceptions import EntityNotFound, PersistenceError
from src.client.schemas import ClientRequest

from src.app.infrastructure.client_repository import ClientRepository

logger = logging.getLogger(__name__)


class IdMismatchError(ValueError):
    """Raised when an update payload names a different client than the route."""

    def __init__(self, route_id: UUID, payload_id: UUID):
        super().__init__("Route id and payload id do not match")
        self.route_id = route_id
        self.payload_id = payload_id


class ClientService:
    """Service for handling Client business logic."""

    def __init__(self, repository: ClientRepository, unit_of_work: UnitOfWork):
        self.repository = repository
        self.unit_of_work = unit_of_work

    async def list_clients(self) -> list[Client]:
        """Get every client."""
        return await self.repository.get_all()

    async def get_client(self, client_id: UUID) -> Client:
        """Get a client by ID."""
        client = await self.repository.get_by_id(client_id)
        if not client:
            raise EntityNotFound("Client", client_id)
        return client

    async def create_client(self, request: ClientRequest) -> Client:
        """
        Validate and persist a new client.

        The identifier is always generated here; any id in the request is ignored.

        Raises:
            EntityValidationError: If a field is missing or too long
            PersistenceError: If the insert wrote no rows
        """
        ensure_valid(validate_client(request.name, request.document, request.phone))

        client = Client(
            id=uuid4(),
            name=request.name,
            document=request.document,
            phone=request.phone,
        )

        async with self.unit_of_work:
            self.unit_of_work.add(client)
            if await self.unit_of_work.save_changes() == 0:
                raise PersistenceError("Client", "create")

        logger.info("Created client %s", client.id)
        return client

    async def update_client(self, client_id: UUID, request: ClientRequest) -> Client:
        """
        Replace the fields of an existing client.

        The route id is authoritative. A payload id, when present, must match it.

        Raises:
            EntityNotFound: If no client has the route id
            EntityValidationError: If a field is missing or too long
            IdMismatchError: If the payload id differs from the route id
            PersistenceError: If the update wrote no rows
        """
        await self.get_client(client_id)

        ensure_valid(validate_client(request.name, request.document, request.phone))
        if request.id is not None and request.id != client_id:
            raise IdMismatchError(client_id, request.id)

        client = Client(
            id=client_id,
            name=request.name,
            document=request.document,
            phone=request.phone,
        )

        async with self.unit_of_work:
            await self.unit_of_work.update(client)
            if await self.unit_of_work.save_changes() == 0:
                raise PersistenceError("Client", "update")

        logger.info("Updated client %s", client_id)
        return client

    async def delete_client(self, client_id: UUID) -> None:
        """
        Remove a client.

        Raises:
            EntityNotFound: If no client has the given id
            PersistenceError: If the delete wrote no rows
        """
        client = await self.get_client(client_id)

        async with self.unit_of_work:
            await self.unit_of_work.delete(client)
            if await self.unit_of_work.save_changes() == 0:
                raise PersistenceError("Client", "delete")

        logger.info("Deleted client %s", client_id)
