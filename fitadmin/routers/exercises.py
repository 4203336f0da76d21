from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlmodel import Session, SQLModel

from fitadmin.database import get_session
from fitadmin.services import catalog

router = APIRouter()

SessionDep = Annotated[Session, Depends(get_session)]


class ExerciseRead(SQLModel):
    id: int
    name: str
    description: str | None
    video_url: str | None
    thumbnail_url: str | None
    created_at: datetime


class ExerciseCreate(SQLModel):
    name: str
    description: str | None = None
    video_url: str | None = None
    thumbnail_url: str | None = None


class ExerciseUpdate(SQLModel):
    name: str | None = None
    description: str | None = None
    video_url: str | None = None
    thumbnail_url: str | None = None


@router.get("/", response_model=list[ExerciseRead])
def list_exercises(session: SessionDep, search: str | None = None):
    return catalog.list_exercises(session, search)


@router.post("/", response_model=ExerciseRead, status_code=201)
def create_exercise(body: ExerciseCreate, session: SessionDep):
    return catalog.create_exercise(
        session,
        name=body.name,
        description=body.description,
        video_url=body.video_url,
        thumbnail_url=body.thumbnail_url,
    )


@router.get("/{id}", response_model=ExerciseRead)
def get_exercise(id: int, session: SessionDep):
    return catalog.get_exercise(session, id)


@router.patch("/{id}", response_model=ExerciseRead)
def update_exercise(id: int, body: ExerciseUpdate, session: SessionDep):
    return catalog.update_exercise(session, id, body.model_dump(exclude_unset=True))


@router.delete("/{id}", status_code=204)
def delete_exercise(id: int, session: SessionDep):
    catalog.delete_exercise(session, id)
