import os

from dotenv import load_dotenv
from pydantic import BaseModel

# Load environment variables from .env file
load_dotenv()

_DEFAULT_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173"


class Settings(BaseModel):
    # LLM (Gemini)
    gemini_api_key: str = os.getenv("GEMINI_API_KEY", "")
    gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")

    # CORS: comma separated list of browser origins
    frontend_origin: str = os.getenv("FRONTEND_ORIGIN", _DEFAULT_ORIGINS)

    # Workspace
    history_limit: int = int(os.getenv("HISTORY_LIMIT", "50"))

    # Server
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def origins(self):
        return [o.strip() for o in self.frontend_origin.split(",") if o.strip()]


# Create a global settings object
settings = Settings()
