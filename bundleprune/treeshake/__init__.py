"""Tree shaking of purged modules out of bundle text, factories and exports."""

from .exports import ExportPurger
from .locator import ReferenceLocator, ScanningLocator, Span
from .registrations import RegistrationPruner

__all__ = [
    "ExportPurger",
    "ReferenceLocator",
    "RegistrationPruner",
    "ScanningLocator",
    "Span",
]
