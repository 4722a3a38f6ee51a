"""Database models"""
from .cat import Cat, CatToy

__all__ = ["Cat", "CatToy"]
