from .catalog import PermissionCatalog, RoleRegistry
from .decision import DecisionEngine
from .ledger import AssignmentLedger

__all__ = ["AssignmentLedger", "DecisionEngine", "PermissionCatalog", "RoleRegistry"]
