import os
from dotenv import load_dotenv

# Load .env.local once at import
load_dotenv(dotenv_path=os.path.join(os.getcwd(), ".env.local"))

from openai import AsyncOpenAI

_client = None


def get_openai_client() -> AsyncOpenAI:
    global _client
    if _client is None:
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise RuntimeError("OPENAI_API_KEY missing (set it in .env.local)")
        # SDK retries disabled; see TranscriptionConfig.max_retries.
        # Timeouts are set per request by each service.
        _client = AsyncOpenAI(api_key=api_key, max_retries=0)
    return _client


def choose_model(kind: str, default: str) -> str:
    # kind in {"stt","prompt"}
    if kind == "stt":
        return os.getenv("STT_OPENAI_MODEL", default)
    return os.getenv("PROMPT_OPENAI_MODEL", default)
