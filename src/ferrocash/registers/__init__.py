"""Cash register directory."""

from ferrocash.registers.service import RegisterService

__all__ = ["RegisterService"]
