"""Room inventory endpoints.

GET  /rooms        → list
POST /rooms        → create (201)
PUT  /rooms/{id}   → partial update (including the maintenance flag)
DELETE /rooms/{id} → remove a room no reservation references

``available + occupied`` is the number of interchangeable units the
availability calculator and admission check work with. ``capacity`` is the
number of guests one unit sleeps.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Path
from psycopg2 import errors as pg_errors
from pydantic import BaseModel, ConfigDict, Field

from innkeep.domain.errors import (
    ConflictError,
    InvalidArgumentError,
    RoomInUseError,
    RoomNotFoundError,
)
from innkeep.infra.db import txn
from innkeep.infra.repositories.rooms_repository import (
    delete_room,
    get_room,
    insert_room,
    list_rooms,
    room_has_reservations,
    update_room,
)
from innkeep.observability.correlation import get_correlation_id
from innkeep.observability.logging import get_logger
from innkeep.observability.redaction import safe_log_context

logger = get_logger(__name__)

router = APIRouter(prefix="/rooms", tags=["rooms"])


# ── Schemas ───────────────────────────────────────────────────────────────────


class CreateRoomRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1)
    capacity: int = Field(..., ge=1)
    price: Decimal = Field(..., gt=0)
    available: int = Field(0, ge=0)
    occupied: int = Field(0, ge=0)
    maintenance: bool = False
    status: str = "available"
    features: list[str] = Field(default_factory=list)


class UpdateRoomRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(None, min_length=1)
    capacity: int | None = Field(None, ge=1)
    price: Decimal | None = Field(None, gt=0)
    available: int | None = Field(None, ge=0)
    occupied: int | None = Field(None, ge=0)
    maintenance: bool | None = None
    status: str | None = None
    features: list[str] | None = None


# ── Routes ────────────────────────────────────────────────────────────────────


@router.get("")
def get_rooms() -> list[dict]:
    with txn() as cur:
        rooms = list_rooms(cur)
    return [room.to_dict() for room in rooms]


@router.post("", status_code=201)
def create_room(body: CreateRoomRequest) -> dict:
    try:
        with txn() as cur:
            room = insert_room(
                cur,
                name=body.name,
                price=body.price,
                guest_capacity=body.capacity,
                available=body.available,
                occupied=body.occupied,
                maintenance=body.maintenance,
                status=body.status,
                features=body.features,
            )
    except pg_errors.UniqueViolation:
        raise ConflictError(f"A room named {body.name!r} already exists") from None

    logger.info(
        "room created",
        extra={
            "extra_fields": safe_log_context(
                correlationId=get_correlation_id(), room_id=room.id
            )
        },
    )
    return {"message": "Room created successfully", "room": room.to_dict()}


@router.put("/{room_id}")
def update_room_route(
    body: UpdateRoomRequest,
    room_id: UUID = Path(..., description="Room UUID"),
) -> dict:
    fields = body.model_dump(exclude_unset=True)
    if "capacity" in fields:
        fields["guest_capacity"] = fields.pop("capacity")
    if not fields:
        raise InvalidArgumentError("No fields to update")
    if any(value is None for value in fields.values()):
        raise InvalidArgumentError("Room fields cannot be set to null")

    try:
        with txn() as cur:
            room = update_room(cur, str(room_id), fields)
    except pg_errors.UniqueViolation:
        raise ConflictError(f"A room named {fields.get('name')!r} already exists") from None

    if room is None:
        raise RoomNotFoundError(str(room_id))

    logger.info(
        "room updated",
        extra={
            "extra_fields": safe_log_context(
                correlationId=get_correlation_id(),
                room_id=room.id,
                fields=sorted(fields),
                maintenance=room.maintenance,
            )
        },
    )
    return {"message": "Room updated successfully", "room": room.to_dict()}


@router.delete("/{room_id}")
def delete_room_route(
    room_id: UUID = Path(..., description="Room UUID"),
) -> dict:
    """Delete a room.

    Refused with 409 while any reservation, past or future, references the
    room. The room row is locked so a concurrent admission cannot slip a
    booking in between the check and the delete.
    """
    with txn() as cur:
        room = get_room(cur, str(room_id), lock=True)
        if room is None:
            raise RoomNotFoundError(str(room_id))
        if room_has_reservations(cur, room.id):
            raise RoomInUseError(room.id)
        delete_room(cur, room.id)

    logger.info(
        "room deleted",
        extra={
            "extra_fields": safe_log_context(
                correlationId=get_correlation_id(), room_id=room.id
            )
        },
    )
    return {"message": "Room deleted successfully", "room": room.to_dict()}
