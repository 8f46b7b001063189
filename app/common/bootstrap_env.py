# app/common/bootstrap_env.py
from __future__ import annotations

from dotenv import find_dotenv, load_dotenv


def load_env() -> str:
    """Load `.env` from the working tree; shell/CI values win. Returns the path used."""
    path = find_dotenv(usecwd=True)
    load_dotenv(path, override=False)
    return path
