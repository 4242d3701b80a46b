"""Infrastructure layer for the record store."""

from . import repositories
from . import external
