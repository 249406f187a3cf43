"""Configuration management for the meeting scheduler."""

import os
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any
from urllib.parse import urlparse

from monitoring import ConfigurationError


DEFAULT_DATA_DIR = Path(__file__).resolve().parent / 'data'


@dataclass
class RemoteConfig:
    """Redmine project source configuration."""
    base_url: str = ""
    api_key: str = ""
    timeout: int = 30
    page_size: int = 100

    def __post_init__(self):
        """Validate configuration."""
        self.base_url = (self.base_url or '').strip().rstrip('/')
        self.api_key = (self.api_key or '').strip()

        if not self.base_url:
            return

        parsed = urlparse(self.base_url)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            raise ValueError(f"Invalid Redmine base_url format: {self.base_url}")

        if self.page_size <= 0:
            raise ValueError("Redmine page_size must be positive")

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    @property
    def host(self) -> Optional[str]:
        if not self.base_url:
            return None
        return urlparse(self.base_url).netloc or None


@dataclass
class NotificationConfig:
    """Chat webhook configuration."""
    webhook_url: str = ""
    timeout: int = 10

    def __post_init__(self):
        self.webhook_url = (self.webhook_url or '').strip()

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)


@dataclass
class StorageConfig:
    """JSON data file locations."""
    data_dir: Path = DEFAULT_DATA_DIR

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)

    @property
    def projects_file(self) -> Path:
        return self.data_dir / 'projects.json'

    @property
    def templates_file(self) -> Path:
        return self.data_dir / 'agenda_templates.json'

    @property
    def schedule_file(self) -> Path:
        return self.data_dir / 'schedule.json'

    @property
    def custom_data_file(self) -> Path:
        return self.data_dir / 'custom_data.json'

    @property
    def holidays_file(self) -> Path:
        return self.data_dir / 'holidays.json'


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_bytes: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


def _mask(value: str) -> str:
    if not value:
        return ""
    return value[:4] + "***" if len(value) > 8 else "***"


@dataclass
class Config:
    """Main application configuration."""
    remote: RemoteConfig = field(default_factory=RemoteConfig)
    notification: NotificationConfig = field(default_factory=NotificationConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> 'Config':
        """Create configuration from environment variables."""
        remote_config = RemoteConfig(
            base_url=os.getenv('REDMINE_BASE_URL', ''),
            api_key=os.getenv('REDMINE_API_KEY', ''),
            timeout=int(os.getenv('REDMINE_TIMEOUT', '30')),
            page_size=int(os.getenv('REDMINE_PAGE_SIZE', '100'))
        )

        notification_config = NotificationConfig(
            webhook_url=os.getenv('SLACK_WEBHOOK_URL', ''),
            timeout=int(os.getenv('SLACK_TIMEOUT', '10'))
        )

        storage_config = StorageConfig(
            data_dir=Path(os.getenv('DATA_DIR', str(DEFAULT_DATA_DIR)))
        )

        server_config = ServerConfig(
            host=os.getenv('SERVER_HOST', '0.0.0.0'),
            port=int(os.getenv('PORT', '3000')),
            debug=os.getenv('SERVER_DEBUG', '').lower() in ('true', '1', 'yes')
        )

        logging_config = LoggingConfig(
            level=os.getenv('LOG_LEVEL', 'INFO').upper(),
            format=os.getenv('LOG_FORMAT', LoggingConfig.format),
            file_path=os.getenv('LOG_FILE'),
            max_bytes=int(os.getenv('LOG_MAX_BYTES', str(LoggingConfig.max_bytes))),
            backup_count=int(os.getenv('LOG_BACKUP_COUNT', str(LoggingConfig.backup_count)))
        )

        return cls(
            remote=remote_config,
            notification=notification_config,
            storage=storage_config,
            server=server_config,
            logging=logging_config
        )

    @classmethod
    def from_file(cls, config_path: str) -> 'Config':
        """Create configuration from JSON file."""
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)

            remote_data = data.get('remote', {})
            remote_config = RemoteConfig(
                base_url=remote_data.get('base_url', ''),
                api_key=remote_data.get('api_key', ''),
                timeout=remote_data.get('timeout', 30),
                page_size=remote_data.get('page_size', 100)
            )

            notification_data = data.get('notification', {})
            notification_config = NotificationConfig(
                webhook_url=notification_data.get('webhook_url', ''),
                timeout=notification_data.get('timeout', 10)
            )

            storage_data = data.get('storage', {})
            storage_config = StorageConfig(
                data_dir=Path(storage_data.get('data_dir', str(DEFAULT_DATA_DIR)))
            )

            server_data = data.get('server', {})
            server_config = ServerConfig(
                host=server_data.get('host', '0.0.0.0'),
                port=server_data.get('port', 3000),
                debug=server_data.get('debug', False)
            )

            logging_data = data.get('logging', {})
            logging_config = LoggingConfig(
                level=logging_data.get('level', 'INFO').upper(),
                format=logging_data.get('format', LoggingConfig.format),
                file_path=logging_data.get('file_path'),
                max_bytes=logging_data.get('max_bytes', LoggingConfig.max_bytes),
                backup_count=logging_data.get('backup_count', LoggingConfig.backup_count)
            )

            return cls(
                remote=remote_config,
                notification=notification_config,
                storage=storage_config,
                server=server_config,
                logging=logging_config
            )

        except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"Invalid configuration file format: {e}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary with secrets masked."""
        return {
            'remote': {
                'base_url': self.remote.base_url,
                'api_key': _mask(self.remote.api_key),
                'timeout': self.remote.timeout,
                'page_size': self.remote.page_size
            },
            'notification': {
                'webhook_url': _mask(self.notification.webhook_url),
                'timeout': self.notification.timeout
            },
            'storage': {
                'data_dir': str(self.storage.data_dir)
            },
            'server': {
                'host': self.server.host,
                'port': self.server.port,
                'debug': self.server.debug
            },
            'logging': {
                'level': self.logging.level,
                'format': self.logging.format,
                'file_path': self.logging.file_path,
                'max_bytes': self.logging.max_bytes,
                'backup_count': self.logging.backup_count
            }
        }

    def setup_logging(self) -> None:
        """Configure logging based on configuration."""
        log_level = getattr(logging, self.logging.level, logging.INFO)

        formatter = logging.Formatter(self.logging.format)

        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)

        # Clear existing handlers
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        if self.logging.file_path:
            from logging.handlers import RotatingFileHandler
            file_handler = RotatingFileHandler(
                self.logging.file_path,
                maxBytes=self.logging.max_bytes,
                backupCount=self.logging.backup_count,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)


def load_config() -> Config:
    """Load configuration from file or environment variables."""
    config_files = [
        'config.json',
        'config/config.json',
        '/etc/meeting-scheduler/config.json'
    ]

    for config_file in config_files:
        if os.path.exists(config_file):
            try:
                return Config.from_file(config_file)
            except Exception as e:
                logging.warning(f"Failed to load config from {config_file}: {e}")

    try:
        return Config.from_env()
    except ValueError as e:
        raise ConfigurationError(f"Invalid environment configuration: {e}")
