"""Regional native-species checklist.

Public API:
  - ChecklistEntry, load_checklist
"""

from flowering_phenology.datasources.checklist.loader import ChecklistEntry, load_checklist

__all__ = ["ChecklistEntry", "load_checklist"]
