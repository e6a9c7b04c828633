"""Browsing a folder of images, zooming, and saving or removing their labels."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

from PIL import Image

from .annotator import Annotator
from .classifier import Classifier, ClassifierError
from .model import LabelMode, Session

ZOOM_FACTOR = 1.1
MIN_SCALE = 0.1
MAX_SCALE = 10.0
IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg")


def _base_name(path: str | Path) -> str:
    return Path(path).name.split(".", 1)[0]


def list_images(directory: str | Path) -> list[Path]:
    """Return the absolute paths of the png/jpg/jpeg files in ``directory``, sorted by name."""
    root = Path(directory)
    if not root.is_dir():
        return []
    files = (p for p in root.iterdir() if p.is_file() and p.suffix.lower() in IMAGE_SUFFIXES)
    return sorted((p.resolve() for p in files), key=lambda p: p.name.lower())


def find_processed(image_paths: Iterable[str | Path], save_path: str | Path) -> set[Path]:
    """Return the images whose base name starts any file name found under ``save_path``."""
    root = Path(save_path)
    if not root.is_dir():
        return set()
    saved = [p.name for p in root.rglob("*") if p.is_file()]
    return {
        Path(path)
        for path in image_paths
        if any(name.startswith(_base_name(path)) for name in saved)
    }


def zoom_scale(current: float, zoom_in: bool) -> float:
    factor = ZOOM_FACTOR if zoom_in else 1 / ZOOM_FACTOR
    return max(MIN_SCALE, min(current * factor, MAX_SCALE))


def fit_scale(image_size: tuple[int, int], viewport_size: tuple[int, int]) -> float:
    """Scale that fits an image entirely inside a viewport."""
    (img_w, img_h), (view_w, view_h) = image_size, viewport_size
    return min(view_w / img_w, view_h / img_h)


class ImageBrowser:
    """The image list with navigation, labelling mode and save-folder handling."""

    def __init__(
        self,
        session: Session,
        annotator: Annotator,
        classifier: Classifier | None = None,
        on_status: Callable[[str], None] | None = None,
        choose_save_path: Callable[[], str | None] | None = None,
        confirm: Callable[[str, str], bool] | None = None,
    ) -> None:
        self.session = session
        self.annotator = annotator
        self.classifier = classifier
        self._on_status = on_status or (lambda message: None)
        self._choose_save_path = choose_save_path or (lambda: "")
        self._confirm = confirm or (lambda title, message: True)
        self.images: list[Path] = []
        self.processed: dict[Path, bool] = {}
        self.current_index = -1
        self.image: Image.Image | None = None
        self.scale = 1.0
        self.viewport_size: tuple[int, int] = (800, 600)

    def open_directory(self, path: str | Path) -> None:
        self._on_status(f"已选择文件夹: {path}")
        self.load_images(list_images(path))
        self.session.is_labeling = not self.session.is_labeling

    def load_images(self, paths: Iterable[str | Path]) -> None:
        self.images = [Path(p) for p in paths]
        self.processed = {path: False for path in self.images}
        self.current_index = 0
        if self.images:
            self.select(0)

    def current_path(self) -> Path | None:
        if 0 <= self.current_index < len(self.images):
            return self.images[self.current_index]
        return None

    def select(self, index: int) -> bool:
        """Show the image at ``index``; out-of-range indexes are ignored."""
        if not 0 <= index < len(self.images):
            return False
        self.current_index = index
        self.display(self.images[index])
        return True

    def next_image(self) -> None:
        if not self.images:
            return
        self.save_current_labels()
        self.session.reset_save_id()
        self.select((self.current_index + 1) % len(self.images))

    def prev_image(self) -> None:
        if not self.images:
            return
        self.save_current_labels()
        self.session.reset_save_id()
        self.select(self.current_index - 1)

    def display(self, path: str | Path) -> bool:
        """Load ``path``, drop the previous labels and fit it to the viewport."""
        try:
            with Image.open(path) as opened:
                opened.load()
                image = opened.copy()
        except (OSError, ValueError):
            return False

        self.session.labels.clear()
        self.image = image
        self.scale = fit_scale(image.size, self.viewport_size)
        self.annotator.set_image(image, self.scale)
        return True

    def zoom(self, zoom_in: bool) -> float | None:
        """Zoom the view one step and redraw; returns the new scale."""
        if self.image is None:
            return None
        self.scale = zoom_scale(self.scale, zoom_in)
        self.annotator.scale = self.scale
        self.annotator.render()
        return self.scale

    def ensure_save_path(self) -> str:
        """Ask for a save folder when none is set and mark images already saved there."""
        if not self.session.save_path:
            self.session.save_path = self._choose_save_path() or ""
            if self.session.save_path:
                self.mark_processed(self.session.save_path)
                self._on_status(
                    f"保存路径: {self.session.save_path} | 格式: {self.session.save_format}"
                )
        return self.session.save_path

    def mark_processed(self, save_path: str | Path) -> set[Path]:
        found = find_processed(self.images, save_path)
        for path in found:
            self.processed[path] = True
        return found

    def save_current_labels(self) -> bool:
        """Save the current image's unsaved labels; returns whether anything was due."""
        self.ensure_save_path()
        if not self.annotator.tmp_label.rect.is_empty():
            self._on_status("请先清除临时标签")
            return False
        if not (self.session.is_labeling and self.session.labels and self.session.has_unsaved()):
            return False

        current = self.current_path()
        if self.session.label_mode is LabelMode.CLS and self.classifier is not None:
            try:
                self.classifier.save_labels(current or "")
            except ClassifierError as exc:
                self._on_status(str(exc))
        if current is not None:
            self.processed[current] = True
        return True

    def toggle_labeling(self) -> bool:
        """Enter or leave labelling mode, saving pending labels on the way out."""
        if self.image is None:
            self._on_status("进入标签模式失败，请先选择图片")
            return self.session.is_labeling

        if not self.session.is_labeling:
            self.session.is_labeling = True
            self._on_status("进入标签模式")
            return True

        if not self.annotator.tmp_label.rect.is_empty():
            self._on_status("退出标签模式失败：请先清除临时标签")
            return True

        if self.session.labels:
            if not self.session.save_path:
                self.ensure_save_path()
            if self.session.has_unsaved():
                self.save_current_labels()

        self.annotator.clear_labels()
        self.session.is_labeling = False
        self._on_status("退出标签模式")
        return False

    def delete_current_labels(self) -> int:
        """Delete the saved crops of the current image after confirmation; returns the count."""
        current = self.current_path()
        if current is None:
            self._on_status("没有可删除文件")
            return 0
        if not self._confirm("确认删除", "确认要删除此图片的标签文件吗？"):
            return 0

        save_dir = Path(self.session.save_path) if self.session.save_path else None
        if save_dir is None or not save_dir.is_dir():
            return 0

        deleted = 0
        for path in list(save_dir.rglob(f"{_base_name(current)}_*")):
            if not path.is_file():
                continue
            try:
                path.unlink()
            except OSError:
                continue
            self.processed[current] = False
            deleted += 1

        if deleted:
            self._on_status(f"已删除 {deleted} 个标签文件")
        return deleted