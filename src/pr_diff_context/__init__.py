"""
PR Diff Context

Pull Request diff의 OLD/NEW 좌표 주석, gap 확장, 자동 컨텍스트 범위 관리 엔진
"""

__version__ = "1.0.0"

from .api import DiffContextAPI

__all__ = ["DiffContextAPI"]
