"""Interactive rectangle drawing and selection on an image."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum, auto

from PIL import Image, ImageDraw

from .model import DetectionLabel, LabelMode, Point, Rect, Session

ORIGIN: Point = (0, 0)

SELECTED_COLOR = (255, 0, 0)
NORMAL_COLOR = (0, 0, 255)
DRAFT_COLOR = (0, 255, 0)


class MouseButton(Enum):
    LEFT = auto()
    RIGHT = auto()
    MIDDLE = auto()


class Key(Enum):
    ESCAPE = auto()
    DELETE = auto()
    BACKSPACE = auto()
    OTHER = auto()


def _outline(draw: ImageDraw.ImageDraw, rect: Rect, color, width: int) -> None:
    right = rect.x + max(rect.width - 1, 0)
    bottom = rect.y + max(rect.height - 1, 0)
    draw.rectangle([rect.x, rect.y, right, bottom], outline=color, width=width)


class Annotator:
    """Turns mouse and key events on a scaled image view into labels."""

    def __init__(
        self,
        session: Session,
        on_status: Callable[[str], None] | None = None,
        on_preview: Callable[[], None] | None = None,
    ) -> None:
        self.session = session
        self._on_status = on_status or (lambda message: None)
        self._on_preview = on_preview or (lambda: None)
        self.image: Image.Image | None = None
        self.scale = 1.0
        self.original: Image.Image | None = None
        self.preview: Image.Image | None = None
        self.displayed: Image.Image | None = None
        self.tmp_label = DetectionLabel()
        self.label_selected = False
        self.is_drawing = False
        self.first_point: Point = ORIGIN
        self.current_point: Point = ORIGIN

    def set_image(self, image: Image.Image | None, scale: float) -> None:
        self.image = image
        self.scale = scale

    def current_image(self) -> Image.Image | None:
        """Return an RGB copy of the source image, or None when there is none."""
        if self.image is None:
            return None
        return self.image.convert("RGB")

    def to_image_point(self, x: float, y: float) -> Point:
        return (int(x / self.scale), int(y / self.scale))

    def label_at(self, point: Point) -> DetectionLabel | None:
        return next((label for label in self.session.labels if label.rect.contains(point)), None)

    def draw_detection(self, image: Image.Image) -> None:
        """Draw saved labels, the pending label and the rectangle being dragged."""
        draw = ImageDraw.Draw(image)
        preview_rect: Rect | None = None
        for label in self.session.labels:
            color = SELECTED_COLOR if label.is_selected else NORMAL_COLOR
            thickness = 2 if label.is_selected else 1
            _outline(draw, label.rect, color, thickness)
            left, top = label.rect.top_left()
            text_height = draw.textbbox((0, 0), label.name)[3]
            draw.text((left, top - text_height), label.name, fill=color)
            if self.session.label_mode is LabelMode.CLS and label.is_selected:
                preview_rect = label.rect

        if not self.tmp_label.rect.is_empty():
            _outline(draw, self.tmp_label.rect, DRAFT_COLOR, 1)

        if self.is_drawing and self.first_point != ORIGIN:
            _outline(draw, Rect.from_points(self.first_point, self.current_point), DRAFT_COLOR, 1)

        if preview_rect is not None:
            self.preview = image.crop(preview_rect.box())

    def render(self) -> Image.Image | None:
        """Redraw the labelled image at the current scale and return it."""
        image = self.current_image()
        if image is None or not self.session.is_labeling:
            return None

        self.original = image.copy()
        if self.session.label_mode in (LabelMode.CLS, LabelMode.DETECTION):
            self.draw_detection(image)

        width, height = image.size
        size = (max(1, int(width * self.scale + 0.5)), max(1, int(height * self.scale + 0.5)))
        self.displayed = image if size == image.size else image.resize(size, Image.LANCZOS)
        self._on_preview()
        return self.displayed

    def press(self, x: float, y: float, button: MouseButton) -> None:
        if self.session.label_mode is None:
            self._on_status("标签模式: 请先选择标签模式")
            return
        if not self.session.is_labeling:
            return

        point = self.to_image_point(x, y)
        label = self.label_at(point)
        if label is not None:
            self.first_point = ORIGIN
            self.is_drawing = False
            self.session.select(label)
            self.label_selected = True
            self._on_status(f"标签模式: 选中标签 '{label.name}'")

        if self.label_selected:
            self.render()

        if button is MouseButton.LEFT and self.first_point == ORIGIN and self.tmp_label.rect.is_empty():
            self.first_point = point
            self.is_drawing = True
            self._on_status("标签模式: 松开鼠标确定标签")

    def move(self, x: float, y: float) -> None:
        if self.is_drawing:
            self.current_point = self.to_image_point(x, y)
            self.render()

    def release(self, x: float, y: float, button: MouseButton) -> None:
        if (
            button is MouseButton.LEFT
            and self.is_drawing
            and self.first_point != ORIGIN
            and self.tmp_label.rect.is_empty()
        ):
            last_point = self.to_image_point(x, y)
            self.tmp_label.rect = Rect.from_points(self.first_point, last_point)
            self.first_point = ORIGIN
            self.is_drawing = False
            self.render()
            self._on_status("标签模式: 标签创建成功")

    def key(self, key: Key) -> None:
        if key is Key.ESCAPE and self.is_drawing:
            self.clear_labels()
            self.render()
        elif key is Key.DELETE or (key is Key.BACKSPACE and self.label_selected):
            if self.session.delete_selected():
                self.render()

    def clear_labels(self) -> None:
        """Drop the pending label and in-progress drag and deselect every label."""
        self.first_point = ORIGIN
        self.current_point = ORIGIN
        self.tmp_label = DetectionLabel()
        self.session.clear_selection()