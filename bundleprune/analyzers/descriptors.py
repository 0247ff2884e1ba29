"""Static tables of the overlay providers and components that may be purged."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple


@dataclass(frozen=True)
class ProviderDescriptor:
    """A controller-style provider registered by the module aggregator's forRoot."""

    module_path: str
    class_name: str

    def resolve(self, library_dir: Path | str) -> "ProviderDescriptor":
        return ProviderDescriptor(
            module_path=_join(library_dir, self.module_path), class_name=self.class_name
        )


@dataclass(frozen=True)
class ComponentDescriptor:
    """An overlay component declared and entry-registered by the module aggregator."""

    component_path: str
    factory_path: str
    class_name: str

    def resolve(self, library_dir: Path | str) -> "ComponentDescriptor":
        return ComponentDescriptor(
            component_path=_join(library_dir, self.component_path),
            factory_path=_join(library_dir, self.factory_path),
            class_name=self.class_name,
        )


PROVIDERS: Tuple[ProviderDescriptor, ...] = (
    ProviderDescriptor("components/action-sheet/action-sheet-controller.js", "ActionSheetController"),
    ProviderDescriptor("components/alert/alert-controller.js", "AlertController"),
    ProviderDescriptor("components/loading/loading-controller.js", "LoadingController"),
    ProviderDescriptor("components/modal/modal-controller.js", "ModalController"),
    ProviderDescriptor("components/picker/picker-controller.js", "PickerController"),
    ProviderDescriptor("components/popover/popover-controller.js", "PopoverController"),
    ProviderDescriptor("components/toast/toast-controller.js", "ToastController"),
)

COMPONENTS: Tuple[ComponentDescriptor, ...] = (
    ComponentDescriptor(
        "components/action-sheet/action-sheet-component.js",
        "components/action-sheet/action-sheet-component.ngfactory.js",
        "ActionSheetCmp",
    ),
    ComponentDescriptor(
        "components/alert/alert-component.js",
        "components/alert/alert-component.ngfactory.js",
        "AlertCmp",
    ),
    ComponentDescriptor(
        "components/loading/loading-component.js",
        "components/loading/loading-component.ngfactory.js",
        "LoadingCmp",
    ),
    ComponentDescriptor(
        "components/modal/modal-component.js",
        "components/modal/modal-component.ngfactory.js",
        "ModalCmp",
    ),
    ComponentDescriptor(
        "components/picker/picker-component.js",
        "components/picker/picker-component.ngfactory.js",
        "PickerCmp",
    ),
    ComponentDescriptor(
        "components/popover/popover-component.js",
        "components/popover/popover-component.ngfactory.js",
        "PopoverCmp",
    ),
    ComponentDescriptor(
        "components/toast/toast-component.js",
        "components/toast/toast-component.ngfactory.js",
        "ToastCmp",
    ),
    ComponentDescriptor(
        "components/select/select-popover-component.js",
        "components/select/select-popover-component.ngfactory.js",
        "SelectPopover",
    ),
)


def resolve_providers(library_dir: Path | str) -> Tuple[ProviderDescriptor, ...]:
    return tuple(descriptor.resolve(library_dir) for descriptor in PROVIDERS)


def resolve_components(library_dir: Path | str) -> Tuple[ComponentDescriptor, ...]:
    return tuple(descriptor.resolve(library_dir) for descriptor in COMPONENTS)


def _join(library_dir: Path | str, relative: str) -> str:
    return (Path(library_dir) / relative).as_posix()


__all__ = [
    "COMPONENTS",
    "ComponentDescriptor",
    "PROVIDERS",
    "ProviderDescriptor",
    "resolve_components",
    "resolve_providers",
]
