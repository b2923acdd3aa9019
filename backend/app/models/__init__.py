from app.models.movie import Movie
from app.models.user import User

__all__ = [
    "Movie",
    "User",
]
