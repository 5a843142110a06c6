from app.utils.base.enums import TokenType

__all__ = ["TokenType"]
