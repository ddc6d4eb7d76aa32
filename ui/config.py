import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

DEFAULT_MATERIAL_SHEET_URL = (
    "https://docs.google.com/spreadsheets/d/1KicP3sEwRexAy8M3A2xRcQIMbwcB_cmlYEsRWKK_FTw/export?format=csv"
)

@dataclass
class Settings:
    MATERIAL_SHEET_URL: str = os.getenv("MATERIAL_SHEET_URL", DEFAULT_MATERIAL_SHEET_URL)
    MATERIAL_SHEET_ENABLED: bool = os.getenv("MATERIAL_SHEET_ENABLED", "true").lower() == "true"
    MATERIAL_SHEET_TIMEOUT_S: float = float(os.getenv("MATERIAL_SHEET_TIMEOUT_S", "15"))
    MATERIAL_SHEET_TTL_S: int = int(os.getenv("MATERIAL_SHEET_TTL_S", "600"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()
