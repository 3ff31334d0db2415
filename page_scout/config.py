# === FILE: page_scout/config.py ===
"""
Конфигурация PageScout: pydantic-модели DiscoveryConfig и LLMConfig
и загрузчик из YAML/JSON.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

__all__ = ("BROWSER_USER_AGENT", "LLMConfig", "DiscoveryConfig", "load_config")

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class LLMConfig(BaseModel):
    """Параметры OpenAI-совместимого chat completion API."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: str = Field("https://api.openai.com/v1", min_length=1, description="Базовый URL API.")
    model: str = Field("gpt-4o-mini", min_length=1, description="Имя модели.")
    api_key: Optional[SecretStr] = Field(None, description="Ключ API (или переменная PAGE_SCOUT_LLM_API_KEY).")
    temperature: float = Field(0.1, ge=0, le=2)
    max_tokens: int = Field(4000, ge=1)
    timeout: float = Field(120.0, gt=0, description="Таймаут одного запроса (секунд).")

    @field_validator("base_url", mode="before")
    def _strip_trailing_slash(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.rstrip("/")
        return v


class DiscoveryConfig(BaseModel):
    """Конфигурация для одного запуска обнаружения страниц."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    user_agent: str = Field(BROWSER_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    max_pages: int = Field(50, ge=1, description="Жесткий лимит по числу страниц в результате.")
    filter_patterns: List[str] = Field(default_factory=list, description="Дополнительные regex-исключения.")
    max_depth: int = Field(3, ge=0, description="Максимальная глубина обхода ссылок.")
    max_visited_pages: int = Field(150, ge=1, description="Предел реально загруженных страниц за обход.")
    sitemap_max_depth: int = Field(2, ge=0, description="Глубина вложенности sitemap index.")
    sitemap_min_urls: int = Field(5, ge=0, description="Сколько URL из sitemap достаточно, чтобы не обходить ссылки.")
    sitemap_timeout: float = Field(15.0, gt=0, description="Таймаут загрузки sitemap (секунд).")
    crawl_timeout: float = Field(15.0, gt=0, description="Таймаут загрузки страницы при обходе (секунд).")
    page_timeout: float = Field(30.0, gt=0, description="Таймаут загрузки страницы по умолчанию (секунд).")
    rate_limit_delay: float = Field(1.0, ge=0, description="Пауза между запросами обхода (секунд).")
    retry_times: int = Field(0, ge=0, description="Число повторных попыток при 429/5xx.")
    llm: Optional[LLMConfig] = Field(None, description="Настройки оценки релевантности.")

    @field_validator("filter_patterns", mode="before")
    def _drop_blank_patterns(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return [p for p in v if not isinstance(p, str) or p.strip()]
        return v


DEFAULT_CONFIG_PATH = Path("configs") / "default.yaml"

# суффикс файла -> (имя формата, функция разбора, исключение разбора)
_FORMATS = {
    ".yaml": ("YAML", yaml.safe_load, yaml.YAMLError),
    ".yml": ("YAML", yaml.safe_load, yaml.YAMLError),
    ".json": ("JSON", json.loads, json.JSONDecodeError),
}


def _read_mapping(path: Path) -> dict[str, Any]:
    """Разбирает YAML/JSON-файл; пустой файл означает пустой конфиг."""
    try:
        fmt, parse, error = _FORMATS[path.suffix.lower()]
    except KeyError:
        raise ValueError(f"Неподдерживаемый формат конфига: {path.suffix or path.name}") from None
    try:
        data = parse(path.read_text(encoding="utf-8"))
    except error as exc:
        raise ValueError(f"Неправильный {fmt} в {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TypeError(f"{path.name}: ожидался mapping верхнего уровня, получено {type(data).__name__}")
    return data


def _apply_env(data: dict[str, Any]) -> dict[str, Any]:
    """Подставляет ключ LLM из окружения, если он не задан в файле."""
    api_key = os.environ.get("PAGE_SCOUT_LLM_API_KEY")
    llm = data.get("llm")
    if api_key and isinstance(llm, dict) and not llm.get("api_key"):
        data = {**data, "llm": {**llm, "api_key": api_key}}
    return data


def load_config(path: Union[str, Path, None] = None) -> DiscoveryConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект DiscoveryConfig.

    Без пути берётся ``configs/default.yaml`` из текущей директории, а если
    его нет, то значения по умолчанию. Явно указанный, но отсутствующий файл
    приводит к FileNotFoundError; ошибки разбора дают ValueError/TypeError,
    ошибки схемы дают pydantic.ValidationError.
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.is_file():
            return DiscoveryConfig()
        source = DEFAULT_CONFIG_PATH
    else:
        source = Path(path).expanduser()
        if not source.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(source))

    return DiscoveryConfig(**_apply_env(_read_mapping(source)))
