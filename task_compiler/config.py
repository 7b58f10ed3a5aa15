"""
Settings for the CLI and program bindings.

Values come from the process environment, optionally seeded from a .env
file in the working directory.
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator
from solders.pubkey import Pubkey

from .programs.gpt import GPT_PROGRAM_ID, ORACLE_PROGRAM_ID
from .programs.tuktuk import TUKTUK_PROGRAM_ID


ENV_FIELDS = {
    "gpt_program_id": "GPT_PROGRAM_ID",
    "oracle_program_id": "ORACLE_PROGRAM_ID",
    "tuktuk_program_id": "TUKTUK_PROGRAM_ID",
    "log_level": "LOG_LEVEL",
}


class Settings(BaseModel):
    gpt_program_id: str = str(GPT_PROGRAM_ID)
    oracle_program_id: str = str(ORACLE_PROGRAM_ID)
    tuktuk_program_id: str = str(TUKTUK_PROGRAM_ID)
    log_level: str = "INFO"

    @field_validator("gpt_program_id", "oracle_program_id", "tuktuk_program_id")
    @classmethod
    def check_pubkey(cls, value: str) -> str:
        try:
            Pubkey.from_string(value)
        except ValueError as exc:
            raise ValueError(f"{value!r} is not a valid pubkey: {exc}") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def check_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return value

    @property
    def gpt_program(self) -> Pubkey:
        return Pubkey.from_string(self.gpt_program_id)

    @property
    def oracle_program(self) -> Pubkey:
        return Pubkey.from_string(self.oracle_program_id)

    @property
    def tuktuk_program(self) -> Pubkey:
        return Pubkey.from_string(self.tuktuk_program_id)

    @classmethod
    def load(cls, env_file: Optional[str] = None) -> "Settings":
        """
        Build settings from the environment.

        A .env file (env_file, or ./.env when present) fills in variables
        that are not already set; explicit environment variables win.
        """
        load_dotenv(env_file or os.path.join(os.getcwd(), ".env"), override=False)
        raw = {
            field: os.environ[env_name]
            for field, env_name in ENV_FIELDS.items()
            if os.environ.get(env_name)
        }
        return cls(**raw)
