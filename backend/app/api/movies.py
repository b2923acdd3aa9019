from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.api.deps import get_admin_claims
from app.database import get_session
from app.schemas.movie import MovieFields, MovieRead
from app.services import movies
from app.services.tokens import TokenClaims

router = APIRouter(prefix="/movies", tags=["movies"])


@router.get("", response_model=list[MovieRead])
def list_movies(session: Session = Depends(get_session)):
    return movies.list_movies(session)


@router.get("/{movie_id}", response_model=MovieRead)
def get_movie(movie_id: int, session: Session = Depends(get_session)):
    return movies.get_movie(session, movie_id)


@router.post("", response_model=MovieRead, status_code=201)
def create_movie(
    body: MovieFields,
    session: Session = Depends(get_session),
    _admin: TokenClaims = Depends(get_admin_claims),
):
    return movies.create_movie(session, body.model_dump(exclude_unset=True))


@router.put("/{movie_id}", response_model=MovieRead)
def update_movie(
    movie_id: int,
    body: MovieFields,
    session: Session = Depends(get_session),
    _admin: TokenClaims = Depends(get_admin_claims),
):
    return movies.update_movie(session, movie_id, body.model_dump(exclude_unset=True))


@router.delete("/{movie_id}", response_model=MovieRead)
def delete_movie(
    movie_id: int,
    session: Session = Depends(get_session),
    _admin: TokenClaims = Depends(get_admin_claims),
):
    return movies.delete_movie(session, movie_id)
