"""Enrollment package for registering and revoking a user's YubiKey."""

from .engine import EnrollmentEngine
from .keygen import KeyGenerator, Pamu2fcfgGenerator
from .transaction import EnrollmentTransaction, Operation, Step

__all__ = ["EnrollmentEngine", "KeyGenerator", "Pamu2fcfgGenerator", "EnrollmentTransaction", "Operation", "Step"]
