from uuid import UUID
from fastapi import APIRouter, Depends, Request, Response, status
from dependency_injector.wiring import Provide, inject

from src.app.api.errors import bad_request
from src.app.api.dependencies import DELETE_CLIENT_CLAIM, get_current_user, require_claim
from src.app.api.mappers import to_client_response
from src.app.containers import Container
from src.app.core.services.client_service import ClientService, IdMismatchError
from src.client.schemas import ClientRequest, ClientResponse
from src.shared.exceptions import EntityNotFound, PersistenceError
from src.app.logging import get_logger

SAVE_ERROR = "There was an error saving the record"

router = APIRouter(prefix="/cliente", tags=["clients"])
logger = get_logger(__name__)


@router.get("", response_model=list[ClientResponse], name="list_clients")
@inject
async def list_clients(
    service: ClientService = Depends(Provide[Container.client_service]),
) -> list[ClientResponse]:
    """List every client. Anonymous."""
    clients = await service.list_clients()
    return [to_client_response(client) for client in clients]


@router.get(
    "/{client_id}",
    response_model=ClientResponse,
    name="get_client_by_id",
    responses={404: {"description": "Client not found (empty body)"}},
)
@inject
async def get_client(
    client_id: UUID,
    service: ClientService = Depends(Provide[Container.client_service]),
):
    """Get a client by ID."""
    try:
        client = await service.get_client(client_id)
    except EntityNotFound as e:
        logger.warning(f"Client not found: {e}")
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    return to_client_response(client)


@router.post(
    "",
    response_model=ClientResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_current_user)],
)
@inject
async def create_client(
    request: ClientRequest,
    http_request: Request,
    response: Response,
    service: ClientService = Depends(Provide[Container.client_service]),
):
    """
    Create a new client.

    Returns 201 with a Location header pointing at the new client, or 400
    with the save error as a bare JSON string if the insert wrote no rows.
    """
    try:
        client = await service.create_client(request)
    except PersistenceError as e:
        logger.error(f"Failed to create client: {e}")
        return bad_request(SAVE_ERROR)

    response.headers["Location"] = str(http_request.url_for("get_client_by_id", client_id=str(client.id)))
    return to_client_response(client)


@router.put(
    "/{client_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    dependencies=[Depends(get_current_user)],
)
@inject
async def update_client(
    client_id: UUID,
    request: ClientRequest,
    service: ClientService = Depends(Provide[Container.client_service]),
) -> Response:
    """
    Replace the fields of an existing client.

    A payload id that conflicts with the route, or a write that changed
    nothing, gets a 400 whose body is the bare message string.
    """
    try:
        await service.update_client(client_id, request)
    except EntityNotFound as e:
        logger.warning(f"Cannot update missing client: {e}")
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    except IdMismatchError as e:
        logger.warning(f"Rejected update of client {client_id}: {e}")
        return bad_request(str(e))
    except PersistenceError as e:
        logger.error(f"Failed to update client: {e}")
        return bad_request(SAVE_ERROR)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{client_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    dependencies=[Depends(require_claim(DELETE_CLIENT_CLAIM))],
)
@inject
async def delete_client(
    client_id: UUID,
    service: ClientService = Depends(Provide[Container.client_service]),
) -> Response:
    """Delete a client. Requires the delete claim."""
    try:
        await service.delete_client(client_id)
    except EntityNotFound as e:
        logger.warning(f"Cannot delete missing client: {e}")
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    except PersistenceError as e:
        logger.error(f"Failed to delete client: {e}")
        return bad_request(SAVE_ERROR)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
