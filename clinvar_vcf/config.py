import os
import pathlib

from dotenv import dotenv_values
from pydantic import BaseModel, field_validator

from clinvar_vcf.tokenizer import DEFAULT_CHUNK_SIZE

_dotenv_env = os.environ.get("DOTENV_ENV", "dev")
_dotenv_values = dotenv_values(pathlib.Path(__file__).parent / f".{_dotenv_env}.env")


def env_or_dotenv_or(
    key_name: str, default: str | None = None, throw: bool = False
) -> str:
    """
    Retrieves a value from the environment.
    If not set, retrieve it from the dotenv file.
    If not set in the dotenv file, return the default value.

    If throw is True, and the value and default is falsy, raise a ValueError.
    """
    val = os.environ.get(key_name, _dotenv_values.get(key_name, default))
    if throw and not val:
        raise ValueError(f"{key_name} must be set")
    return val


class Env(BaseModel):
    pass


class ConvertEnv(Env):
    bcftools: str
    read_chunk_size: int
    progress_interval: int
    log_level: str

    @field_validator("bcftools")
    @classmethod
    def _validate_bcftools(cls, v, _info):
        if not v:
            raise ValueError("CLINVAR_VCF_BCFTOOLS must not be empty")
        return v

    @field_validator("read_chunk_size", "progress_interval")
    @classmethod
    def _validate_positive(cls, v, info):
        if v <= 0:
            raise ValueError(f"{info.field_name} must be positive, got {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v, _info):
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


def get_convert_env() -> ConvertEnv:
    env = ConvertEnv(
        bcftools=env_or_dotenv_or("CLINVAR_VCF_BCFTOOLS", default="bcftools"),
        read_chunk_size=env_or_dotenv_or(
            "CLINVAR_VCF_READ_CHUNK_SIZE", default=str(DEFAULT_CHUNK_SIZE)
        ),
        progress_interval=env_or_dotenv_or(
            "CLINVAR_VCF_PROGRESS_INTERVAL", default="60"
        ),
        log_level=env_or_dotenv_or("CLINVAR_VCF_LOG_LEVEL", default="INFO"),
    )
    _set_env(env)
    return env


def _set_env(env: Env):
    if getattr(Env, "env", None) is None:
        Env.env = env
    return Env.env


def get_env() -> ConvertEnv:
    return getattr(Env, "env", None) or get_convert_env()
