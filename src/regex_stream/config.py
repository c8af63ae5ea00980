"""
Configuração centralizada para regex_stream.

Usa variáveis de ambiente com fallback para valores padrão.

Uso:
    from regex_stream.config import settings

    print(settings.read_size)         # 65536
    print(settings.buffer_warning)    # 1048576
"""

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache


def _env_int(name: str, default: str) -> int:
    return int(os.getenv(name, default))


@dataclass
class Settings:
    """Configurações do sistema."""

    # Logging (só o script configura handlers)
    log_level: str = field(default_factory=lambda: os.getenv("REGEX_STREAM_LOG_LEVEL", "INFO"))

    # Leitura da entrada pelo script
    read_size: int = field(default_factory=lambda: _env_int("REGEX_STREAM_READ_SIZE", "65536"))
    encoding: str = field(default_factory=lambda: os.getenv("REGEX_STREAM_ENCODING", "utf-8"))

    # Tamanho do buffer (caracteres) a partir do qual o matcher avisa; 0 desliga
    buffer_warning: int = field(default_factory=lambda: _env_int("REGEX_STREAM_BUFFER_WARNING", "1048576"))

    @property
    def log_level_number(self) -> int:
        """Nível numérico para logging.basicConfig."""
        level = logging.getLevelName(self.log_level.strip().upper())
        return level if isinstance(level, int) else logging.INFO


@lru_cache()
def get_settings() -> Settings:
    """Retorna singleton das configurações."""
    return Settings()


# Singleton para acesso direto
settings = get_settings()


def override_settings(**kwargs) -> Settings:
    """Sobrescreve configurações (útil para testes)."""
    get_settings.cache_clear()
    for key, value in kwargs.items():
        os.environ[f"REGEX_STREAM_{key.upper()}"] = str(value)
    return get_settings()
