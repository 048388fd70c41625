from pathlib import Path
from typing import Union
import yaml
from dotenv import load_dotenv
import os
from src.models.config import Config


def load_config(config_path: Union[str, Path] = "config.yaml") -> Config:
    """Загрузка конфигурации из .env и config.yaml"""
    # Загрузка .env
    load_dotenv()

    # Загрузка config.yaml
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"{config_path} not found")

    with open(config_path) as f:
        yaml_config = yaml.safe_load(f) or {}

    # Env переменные имеют приоритет над yaml
    removebg = dict(yaml_config.get("removebg") or {})
    if os.getenv("REMOVEBG_API_KEY"):
        removebg["api_key"] = os.getenv("REMOVEBG_API_KEY")
    if os.getenv("REMOVEBG_API_URL"):
        removebg["api_url"] = os.getenv("REMOVEBG_API_URL")

    server = dict(yaml_config.get("server") or {})
    if os.getenv("WS_HOST"):
        server["host"] = os.getenv("WS_HOST")
    if os.getenv("WS_PORT"):
        server["port"] = int(os.getenv("WS_PORT"))

    config_data = {
        **{k: v for k, v in yaml_config.items() if k not in ("removebg", "server")},
        "removebg": removebg,
        "server": server,
        "data_dir": Path(os.getenv("DATA_DIR") or yaml_config.get("data_dir", "data")),
        "logs_dir": Path(os.getenv("LOGS_DIR") or yaml_config.get("logs_dir", "logs")),
    }

    return Config(**config_data)
