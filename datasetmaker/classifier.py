"""Classification labelling: naming regions, cropping them and writing them per class."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from PIL import Image

from .annotator import Annotator
from .model import DetectionLabel, Rect, Session

PAD_COLOR = (125, 125, 125)


class ClassifierError(Exception):
    """Raised when a classification label cannot be created or saved."""


def _to_int(value: object) -> int:
    try:
        return int(str(value).strip())
    except ValueError:
        return 0


def _base_name(path: str | Path) -> str:
    return Path(path).name.split(".", 1)[0]


def _clipped_box(rect: Rect, size: tuple[int, int]) -> tuple[int, int, int, int]:
    left, top, right, bottom = rect.box()
    width, height = size
    left, top = max(left, 0), max(top, 0)
    right, bottom = min(right, width), min(bottom, height)
    return (left, top, max(left, right), max(top, bottom))


def letterbox(image: Image.Image, width: int, height: int) -> Image.Image:
    """Scale ``image`` to fit ``width`` x ``height`` keeping its aspect, padding with grey."""
    if width <= 0 or height <= 0:
        raise ValueError("letterbox size must be positive")
    source = image.convert("RGB")
    src_w, src_h = source.size
    scale = min(width / src_w, height / src_h)
    new_w = max(1, int(src_w * scale))
    new_h = max(1, int(src_h * scale))
    resized = source.resize((new_w, new_h), Image.BILINEAR)
    canvas = Image.new("RGB", (width, height), PAD_COLOR)
    canvas.paste(resized, ((width - new_w) // 2, (height - new_h) // 2))
    return canvas


class Classifier:
    """Turns the pending rectangle into class labels and writes crops into class folders."""

    def __init__(
        self,
        session: Session,
        annotator: Annotator | None = None,
        on_status: Callable[[str], None] | None = None,
    ) -> None:
        self.session = session
        self.annotator = annotator
        self._on_status = on_status or (lambda message: None)
        self.class_name = ""
        self.width = 0
        self.height = 0

    def _require_annotator(self) -> Annotator:
        if self.annotator is None:
            raise ClassifierError("错误: 未初始化图像标签")
        return self.annotator

    def select_class(self, name: str) -> None:
        self.class_name = name

    def configure_crop(self, auto_cut: bool, width: object = "", height: object = "") -> None:
        """Enable or disable fixed-size output crops; sizes accept ints or numeric text."""
        self.session.auto_cut = auto_cut
        if auto_cut:
            self.width = _to_int(width)
            self.height = _to_int(height)
            self._on_status(f"自动裁剪模式: 裁剪大小为 {width}x{height}")
        else:
            self._on_status("自动裁剪未启用")

    def create_label(self) -> DetectionLabel:
        """Turn the annotator's pending rectangle into a selected label of the chosen class."""
        annotator = self._require_annotator()
        if (self.session.auto_cut and self.width == 0) or self.height == 0:
            raise ClassifierError("保存错误: 未设置裁剪大小")
        if not self.class_name:
            raise ClassifierError("保存错误: 未选择类别")
        if annotator.tmp_label.rect.is_empty():
            raise ClassifierError("保存错误: 未创建标签")

        self.session.clear_selection()
        label = DetectionLabel(name=self.class_name, rect=annotator.tmp_label.rect, is_selected=True)
        self.session.labels.append(label)
        annotator.tmp_label = DetectionLabel()
        annotator.render()
        self._on_status("标签创建成功")
        return label

    def create_file_name(self, original_name: str) -> str:
        return f"{original_name}_{self.session.next_save_id()}.jpg"

    def save_cropped_image(self, crop: Image.Image, original_name: str, class_name: str) -> Path:
        """Write ``crop`` into the class folder under the save path and return its path."""
        class_dir = Path(self.session.save_path) / class_name
        try:
            class_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ClassifierError(f"创建文件夹失败: {class_dir}") from exc

        full_path = class_dir / self.create_file_name(original_name)
        if self.session.auto_cut and self.width and self.height:
            output = letterbox(crop, self.width, self.height)
        else:
            output = crop.convert("RGB")
        try:
            output.save(full_path, format="JPEG")
        except (OSError, ValueError) as exc:
            raise ClassifierError(f"保存图像失败: {full_path}") from exc
        return full_path

    def save_labels(self, image_path: str | Path) -> int:
        """Save a crop for every unsaved label and return how many were written."""
        if not self.session.save_path:
            raise ClassifierError("保存路径未设置")
        annotator = self._require_annotator()
        original = annotator.original
        if original is None:
            raise ClassifierError("错误: 图像为空")

        original_name = _base_name(image_path)
        saved = 0
        for label in self.session.labels:
            if label.is_saved:
                continue
            crop = original.crop(_clipped_box(label.rect, original.size))
            self.save_cropped_image(crop, original_name, label.name)
            label.is_saved = True
            saved += 1

        if saved:
            self._on_status(f"已保存 {saved} 张图像")
        else:
            self._on_status("没要需要保存的标签")
        return saved

    def preview(self) -> Image.Image | None:
        """Crop of the pending rectangle, else of the selected label, else None."""
        if self.annotator is None or self.annotator.original is None:
            return None
        original = self.annotator.original

        if not self.annotator.tmp_label.rect.is_empty():
            return original.crop(_clipped_box(self.annotator.tmp_label.rect, original.size))
        selected = self.session.selected()
        if selected:
            return original.crop(_clipped_box(selected[-1].rect, original.size))
        return None