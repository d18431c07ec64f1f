import os
from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

def _flag(var: str, default: str) -> bool:
    return os.getenv(var, default).strip().lower() in ("1", "true", "yes", "on")

class Settings(BaseModel):
    token: str = Field(default_factory=lambda: os.getenv("DISCORD_TOKEN",""))
    guild_id: int = int(os.getenv("GUILD_ID","0"))
    data_dir: str = os.getenv("DATA_DIR","./data")
    db_name: str = os.getenv("DB_NAME","astryx.db")
    sync_scope: str = os.getenv("SYNC_SCOPE", "both")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    # Coins granted when an account is lazily created
    starting_balance: int = int(os.getenv("STARTING_BALANCE", "1000"))
    # Progression invariants: raise in dev/test, log in prod
    strict_invariants: bool = _flag("STRICT_INVARIANTS", "1")

settings = Settings()
