from ..persistence import settings as repo
from .models import ServerSettings

def load(con) -> ServerSettings:
    row = repo.get(con)
    if row is None:
        return ServerSettings()
    return ServerSettings(**{k: row[k] for k in row.keys()})
