"""
Configuration Management

시스템 설정 관리
"""

import os
import yaml
from dataclasses import dataclass, field, fields
from typing import Optional, Dict, Any
from pathlib import Path
import logging


@dataclass
class AnnotatorConfig:
    """diff 주석기 설정"""
    min_line_num_width: int = 4
    unknown_prefix_policy: str = "context"


@dataclass
class GapConfig:
    """gap 확장 설정"""
    default_expand_lines: int = 20
    small_gap_threshold: int = 10
    auto_expand_threshold: int = 6


@dataclass
class AutoContextConfig:
    """자동 컨텍스트 범위 설정"""
    line_padding: int = 10
    file_comment_default_lines: int = 50
    max_range: int = 500
    label: str = "Auto-added for comment"


@dataclass
class GitHubConfig:
    """GitHub API 설정"""
    token: Optional[str] = None
    api_base_url: str = "https://api.github.com"
    timeout_seconds: int = 30


@dataclass
class LoggingConfig:
    """로깅 설정"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class AppConfig:
    """전체 애플리케이션 설정"""
    annotator: AnnotatorConfig = field(default_factory=AnnotatorConfig)
    gaps: GapConfig = field(default_factory=GapConfig)
    auto_context: AutoContextConfig = field(default_factory=AutoContextConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    debug: bool = False

    @classmethod
    def from_env(cls) -> "AppConfig":
        """환경 변수에서 설정 로드"""
        return cls(
            annotator=AnnotatorConfig(
                min_line_num_width=int(os.getenv("MIN_LINE_NUM_WIDTH", "4")),
                unknown_prefix_policy=os.getenv("UNKNOWN_PREFIX_POLICY", "context"),
            ),
            gaps=GapConfig(
                default_expand_lines=int(os.getenv("GAP_EXPAND_LINES", "20")),
                small_gap_threshold=int(os.getenv("SMALL_GAP_THRESHOLD", "10")),
                auto_expand_threshold=int(os.getenv("AUTO_EXPAND_THRESHOLD", "6")),
            ),
            auto_context=AutoContextConfig(
                line_padding=int(os.getenv("CONTEXT_LINE_PADDING", "10")),
                file_comment_default_lines=int(os.getenv("CONTEXT_FILE_COMMENT_LINES", "50")),
                max_range=int(os.getenv("CONTEXT_MAX_RANGE", "500")),
                label=os.getenv("CONTEXT_LABEL", "Auto-added for comment"),
            ),
            github=GitHubConfig(
                token=os.getenv("GITHUB_TOKEN"),
                api_base_url=os.getenv("GITHUB_API_URL", "https://api.github.com"),
                timeout_seconds=int(os.getenv("GITHUB_TIMEOUT", "30")),
            ),
            logging=LoggingConfig(
                level=os.getenv("LOG_LEVEL", "INFO"),
                format=os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
                file_path=os.getenv("LOG_FILE"),
                max_file_size=int(os.getenv("LOG_MAX_SIZE", str(10 * 1024 * 1024))),
                backup_count=int(os.getenv("LOG_BACKUP_COUNT", "5")),
            ),
            debug=_env_bool("DEBUG", "false"),
        )

    @classmethod
    def from_yaml(cls, config_path: str) -> "AppConfig":
        """YAML 파일에서 설정 로드"""
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> "AppConfig":
        """딕셔너리에서 설정 생성 (누락된 섹션은 기본값 사용)"""
        return cls(
            annotator=AnnotatorConfig(**(config_data.get('annotator') or {})),
            gaps=GapConfig(**(config_data.get('gaps') or {})),
            auto_context=AutoContextConfig(**(config_data.get('auto_context') or {})),
            github=GitHubConfig(**(config_data.get('github') or {})),
            logging=LoggingConfig(**(config_data.get('logging') or {})),
            debug=bool(config_data.get('debug', False)),
        )

    def validate(self) -> None:
        """설정 유효성 검사"""
        errors = []

        # 주석기 설정 검증
        if self.annotator.min_line_num_width < 2:
            errors.append("Line number width must be at least 2")
        if self.annotator.unknown_prefix_policy not in {"context", "strict"}:
            errors.append(f"Invalid unknown prefix policy: {self.annotator.unknown_prefix_policy}")

        # gap 설정 검증
        if self.gaps.default_expand_lines < 1:
            errors.append("Gap expand lines must be positive")
        if self.gaps.small_gap_threshold < 0 or self.gaps.auto_expand_threshold < 0:
            errors.append("Gap thresholds must be non-negative")

        # 자동 컨텍스트 범위 검증
        if self.auto_context.line_padding < 0:
            errors.append("Context line padding must be non-negative")
        if self.auto_context.file_comment_default_lines < 1:
            errors.append("File comment default lines must be positive")
        if self.auto_context.max_range < 1:
            errors.append("Context max range must be positive")

        if self.github.timeout_seconds <= 0:
            errors.append("GitHub timeout must be positive")

        # 로그 레벨 검증
        valid_log_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if self.logging.level.upper() not in valid_log_levels:
            errors.append(f"Invalid log level: {self.logging.level}")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

    def to_dict(self) -> Dict[str, Any]:
        """설정을 딕셔너리로 변환"""
        def section(obj) -> Dict[str, Any]:
            return {f.name: getattr(obj, f.name) for f in fields(obj)}

        github = section(self.github)
        # 보안상 토큰은 제외
        github.pop('token')

        return {
            'annotator': section(self.annotator),
            'gaps': section(self.gaps),
            'auto_context': section(self.auto_context),
            'github': github,
            'logging': section(self.logging),
            'debug': self.debug,
        }


class ConfigManager:
    """설정 관리자"""

    def __init__(self, config: Optional[AppConfig] = None):
        self._config = config or AppConfig.from_env()
        self._config.validate()
        self._setup_logging()

    @property
    def config(self) -> AppConfig:
        """현재 설정 반환"""
        return self._config

    def update_config(self, **kwargs) -> None:
        """설정 업데이트"""
        config_dict = self._config.to_dict()
        token = self._config.github.token

        for key, value in kwargs.items():
            if '.' in key:
                # 중첩된 설정 (예: 'auto_context.max_range')
                section, name = key.split('.', 1)
                if section not in config_dict or not isinstance(config_dict[section], dict):
                    raise KeyError(f"Unknown config section: {section}")
                if section == 'github' and name == 'token':
                    token = value
                    continue
                config_dict[section][name] = value
            else:
                # 최상위 설정
                config_dict[key] = value

        config_dict['github']['token'] = token
        new_config = AppConfig.from_dict(config_dict)
        new_config.validate()

        self._config = new_config
        self._setup_logging()

    def _setup_logging(self) -> None:
        """로깅 설정"""
        logging.basicConfig(
            level=getattr(logging, self._config.logging.level.upper()),
            format=self._config.logging.format,
        )

        # 파일 로깅이 설정된 경우 로테이션 설정
        if self._config.logging.file_path:
            from logging.handlers import RotatingFileHandler

            root_logger = logging.getLogger()
            target = os.path.abspath(self._config.logging.file_path)
            already_attached = any(
                isinstance(h, RotatingFileHandler) and h.baseFilename == target
                for h in root_logger.handlers
            )
            if not already_attached:
                handler = RotatingFileHandler(
                    self._config.logging.file_path,
                    maxBytes=self._config.logging.max_file_size,
                    backupCount=self._config.logging.backup_count,
                )
                handler.setFormatter(logging.Formatter(self._config.logging.format))

                # 루트 로거에 핸들러 추가
                root_logger.addHandler(handler)


# 전역 설정 관리자 인스턴스 (최초 사용 시 생성)
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """전역 설정 관리자 반환"""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> AppConfig:
    """현재 설정 반환"""
    return get_config_manager().config


def update_config(**kwargs) -> None:
    """설정 업데이트"""
    get_config_manager().update_config(**kwargs)


def reset_config(config: Optional[AppConfig] = None) -> None:
    """전역 설정 관리자 재설정"""
    global _config_manager
    _config_manager = ConfigManager(config) if config is not None else None
