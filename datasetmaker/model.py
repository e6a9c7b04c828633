"""Core data types shared by the labelling tools: rectangles, labels and session state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

Point = tuple[int, int]


@dataclass(frozen=True)
class Rect:
    """An axis-aligned integer rectangle; the right and bottom edges are exclusive."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @classmethod
    def from_points(cls, first: Point, second: Point) -> Rect:
        """Build the rectangle spanned by two corner points, in any order."""
        (x1, y1), (x2, y2) = first, second
        return cls(min(x1, x2), min(y1, y2), abs(x2 - x1), abs(y2 - y1))

    def contains(self, point: Point) -> bool:
        px, py = point
        return self.x <= px < self.x + self.width and self.y <= py < self.y + self.height

    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def top_left(self) -> Point:
        return (self.x, self.y)

    def box(self) -> tuple[int, int, int, int]:
        """Return (left, top, right, bottom) with exclusive right and bottom."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)


@dataclass
class DetectionLabel:
    """A named region of an image."""

    name: str = ""
    rect: Rect = field(default_factory=Rect)
    is_selected: bool = False
    is_saved: bool = False


class LabelMode(Enum):
    CLS = "cls"
    DETECTION = "detection"


@dataclass
class Session:
    """Labelling state shared between the image view, the browser and the class panel."""

    save_path: str = ""
    save_format: str = "yolo"
    label_mode: LabelMode | None = None
    is_labeling: bool = False
    confidence: float = 0.0
    labels: list[DetectionLabel] = field(default_factory=list)
    auto_cut: bool = False
    save_id: int = 0

    def clear_selection(self) -> None:
        for label in self.labels:
            label.is_selected = False

    def select(self, label: DetectionLabel) -> None:
        """Make ``label`` the only selected label."""
        self.clear_selection()
        label.is_selected = True

    def selected(self) -> list[DetectionLabel]:
        return [label for label in self.labels if label.is_selected]

    def has_unsaved(self) -> bool:
        return any(not label.is_saved for label in self.labels)

    def delete_selected(self) -> int:
        """Remove every selected label and return how many were removed."""
        kept = [label for label in self.labels if not label.is_selected]
        removed = len(self.labels) - len(kept)
        self.labels[:] = kept
        return removed

    def next_save_id(self) -> int:
        self.save_id += 1
        return self.save_id

    def reset_save_id(self) -> None:
        self.save_id = 0