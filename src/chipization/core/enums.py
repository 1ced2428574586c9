"""Enums for the Chipization tracker."""

from enum import Enum


class Gender(str, Enum):
    """Animal gender."""

    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


class LifeStatus(str, Enum):
    """Life status of a chipped animal. ALIVE -> DEAD is one-way."""

    ALIVE = "ALIVE"
    DEAD = "DEAD"


class Role(str, Enum):
    """Account roles. Every role carries the "user" capability."""

    ADMIN = "ADMIN"
    CHIPPER = "CHIPPER"
    USER = "USER"
