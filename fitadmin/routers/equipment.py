from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlmodel import Session, SQLModel

from fitadmin.database import get_session
from fitadmin.services import catalog

router = APIRouter()

SessionDep = Annotated[Session, Depends(get_session)]


class EquipmentRead(SQLModel):
    id: int
    name: str
    created_at: datetime


class EquipmentWrite(SQLModel):
    name: str


@router.get("/", response_model=list[EquipmentRead])
def list_equipment(session: SessionDep, search: str | None = None):
    return catalog.list_equipment(session, search)


@router.post("/", response_model=EquipmentRead, status_code=201)
def create_equipment(body: EquipmentWrite, session: SessionDep):
    return catalog.create_equipment(session, body.name)


@router.get("/{id}", response_model=EquipmentRead)
def get_equipment(id: int, session: SessionDep):
    return catalog.get_equipment(session, id)


@router.patch("/{id}", response_model=EquipmentRead)
def rename_equipment(id: int, body: EquipmentWrite, session: SessionDep):
    return catalog.update_equipment(session, id, {"name": body.name})


@router.delete("/{id}", status_code=204)
def delete_equipment(id: int, session: SessionDep):
    catalog.delete_equipment(session, id)
