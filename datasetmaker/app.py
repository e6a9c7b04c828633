"""Main window wiring the image browser, the annotator and the class panel together."""

from __future__ import annotations

import argparse
import json
from collections.abc import Callable
from pathlib import Path

from PIL import Image

from .annotator import Annotator, Key, MouseButton
from .browser import ImageBrowser
from .classifier import Classifier, ClassifierError
from .model import LabelMode, Session

READY_MESSAGE = "就绪"
MODE_MESSAGES = {
    LabelMode.CLS: "切换到图像分类模式",
    LabelMode.DETECTION: "切换到装甲板目标检测模式",
}
DEFAULT_CLASSES = ("1", "2", "3", "4", "5", "6", "7", "8")
PREVIEW_SIZE = (200, 200)
SETTINGS_FILE = Path.home() / ".datasetmaker.json"


class AppController:
    """Application state and menu actions, independent of any widget toolkit."""

    def __init__(
        self,
        on_status: Callable[[str], None] | None = None,
        choose_directory: Callable[[], str | None] | None = None,
        choose_save_path: Callable[[], str | None] | None = None,
        confirm: Callable[[str, str], bool] | None = None,
    ) -> None:
        self._on_status = on_status or (lambda message: None)
        self._choose_directory = choose_directory or (lambda: "")
        self.last_status = ""
        self.current_panel: LabelMode | None = None
        self.preview_image: Image.Image | None = None
        self.preview_listener: Callable[[Image.Image | None], None] | None = None

        self.session = Session()
        self.annotator = Annotator(self.session, self.status, self._update_preview)
        self.classifier = Classifier(self.session, self.annotator, self.status)
        self.browser = ImageBrowser(
            self.session,
            self.annotator,
            self.classifier,
            self.status,
            choose_save_path,
            confirm,
        )
        self.status(READY_MESSAGE)

    def _update_preview(self) -> None:
        self.preview_image = self.classifier.preview()
        if self.preview_listener is not None:
            self.preview_listener(self.preview_image)

    def open_directory(self) -> bool:
        """Ask for a folder and load its images; returns whether one was chosen."""
        path = self._choose_directory() or ""
        if not path:
            return False
        self.browser.open_directory(path)
        return True

    def use_yolo_format(self) -> bool:
        self.session.save_format = "yolo"
        return self.open_directory()

    def set_mode(self, mode: LabelMode | str) -> LabelMode:
        """Switch the labelling mode; accepts a LabelMode or its value."""
        label_mode = LabelMode(mode)
        self.session.label_mode = label_mode
        self.current_panel = label_mode
        self.status(MODE_MESSAGES[label_mode])
        return label_mode

    def status(self, message: str) -> None:
        self.last_status = message
        self._on_status(message)


class MainWindow:
    """Tk front end: image list on the left, canvas in the middle, class panel on the right."""

    def __init__(self, root) -> None:
        import tkinter as tk
        from tkinter import filedialog, messagebox

        self._tk = tk
        self.root = root
        root.title("DatasetMaker")
        self._status_var = tk.StringVar(value="")
        self.controller = AppController(
            on_status=self._status_var.set,
            choose_directory=lambda: filedialog.askdirectory(
                parent=root, title="选择文件夹", mustexist=True
            )
            or "",
            choose_save_path=lambda: filedialog.askdirectory(
                parent=root, title="选择保存路径", initialdir=str(Path.home())
            )
            or "",
            confirm=lambda title, message: bool(messagebox.askyesno(title, message, parent=root)),
        )
        self.controller.preview_listener = self._show_preview
        self._photo = None
        self._preview_photo = None

        self._build_menu()
        self._build_layout()
        self._bind_canvas()

    # -- construction -------------------------------------------------

    def _build_menu(self) -> None:
        tk = self._tk
        menubar = tk.Menu(self.root)
        file_menu = tk.Menu(menubar, tearoff=False)
        file_menu.add_command(label="打开文件", command=self._open_directory)
        file_menu.add_command(label="YOLO", command=self._use_yolo)
        file_menu.add_separator()
        file_menu.add_command(label="退出", command=self._exit)
        menubar.add_cascade(label="文件", menu=file_menu)

        mode_menu = tk.Menu(menubar, tearoff=False)
        mode_menu.add_command(label="图像分类", command=lambda: self._set_mode(LabelMode.CLS))
        mode_menu.add_command(
            label="目标检测", command=lambda: self._set_mode(LabelMode.DETECTION)
        )
        menubar.add_cascade(label="模式", menu=mode_menu)
        self.root.config(menu=menubar)

    def _build_layout(self) -> None:
        tk = self._tk
        status_bar = tk.Label(self.root, textvariable=self._status_var, anchor="w", relief="sunken")
        status_bar.pack(side="bottom", fill="x")

        left = tk.Frame(self.root)
        left.pack(side="left", fill="y")
        buttons = (
            ("打开文件夹", self._open_directory),
            ("上一张", lambda: self._navigate(self.controller.browser.prev_image)),
            ("下一张", lambda: self._navigate(self.controller.browser.next_image)),
            ("标签模式", self._toggle_labeling),
            ("保存", self._choose_save),
            ("删除", self._delete_labels),
        )
        for text, command in buttons:
            tk.Button(left, text=text, command=command).pack(fill="x", padx=4, pady=2)
        self._listbox = tk.Listbox(left, exportselection=False, width=30)
        self._listbox.pack(fill="both", expand=True, padx=4, pady=4)
        self._listbox.bind("<<ListboxSelect>>", self._on_list_select)

        self._right = tk.Frame(self.root, width=240)
        self._right.pack(side="right", fill="y")
        self._cls_panel = self._build_cls_panel(self._right)
        self._detection_panel = tk.Frame(self._right)
        tk.Label(self._detection_panel, text="目标检测").pack(padx=8, pady=8)

        middle = tk.Frame(self.root)
        middle.pack(side="left", fill="both", expand=True)
        self._canvas = tk.Canvas(middle, background="#ffffff", highlightthickness=0)
        hbar = tk.Scrollbar(middle, orient="horizontal", command=self._canvas.xview)
        vbar = tk.Scrollbar(middle, orient="vertical", command=self._canvas.yview)
        self._canvas.configure(xscrollcommand=hbar.set, yscrollcommand=vbar.set)
        hbar.pack(side="bottom", fill="x")
        vbar.pack(side="right", fill="y")
        self._canvas.pack(side="left", fill="both", expand=True)
        self._canvas.create_text(
            20, 20, anchor="nw", text="请选择图片", fill="#808080", font=("TkDefaultFont", 18)
        )

    def _build_cls_panel(self, parent):
        tk = self._tk
        panel = tk.Frame(parent)
        self._class_var = tk.StringVar(value="")
        tk.Label(panel, text="类别").pack(anchor="w", padx=4)
        for name in DEFAULT_CLASSES:
            tk.Radiobutton(
                panel,
                text=name,
                value=name,
                variable=self._class_var,
                command=lambda: self.controller.classifier.select_class(self._class_var.get()),
            ).pack(anchor="w", padx=8)

        self._auto_cut_var = tk.BooleanVar(value=False)
        tk.Checkbutton(
            panel, text="自动裁剪", variable=self._auto_cut_var, command=self._on_auto_cut
        ).pack(anchor="w", padx=4, pady=(8, 0))
        size_row = tk.Frame(panel)
        size_row.pack(fill="x", padx=4)
        self._width_entry = tk.Entry(size_row, width=6, state="disabled")
        self._height_entry = tk.Entry(size_row, width=6, state="disabled")
        self._width_entry.pack(side="left")
        tk.Label(size_row, text="x").pack(side="left")
        self._height_entry.pack(side="left")
        tk.Button(panel, text="确定", command=self._on_sure).pack(fill="x", padx=4, pady=2)
        tk.Button(panel, text="创建标签", command=self._create_label).pack(fill="x", padx=4, pady=2)
        self._preview_label = tk.Label(panel, width=PREVIEW_SIZE[0] // 8, height=PREVIEW_SIZE[1] // 16)
        self._preview_label.pack(padx=4, pady=8)
        return panel

    def _bind_canvas(self) -> None:
        canvas = self._canvas
        canvas.bind("<Configure>", self._on_canvas_resize)
        canvas.bind("<ButtonPress-1>", lambda e: self._on_press(e, MouseButton.LEFT))
        canvas.bind("<ButtonPress-2>", lambda e: self._on_press(e, MouseButton.MIDDLE))
        canvas.bind("<ButtonPress-3>", lambda e: self._on_press(e, MouseButton.RIGHT))
        canvas.bind("<B1-Motion>", self._on_move)
        canvas.bind("<ButtonRelease-1>", lambda e: self._on_release(e, MouseButton.LEFT))
        canvas.bind("<Key>", self._on_key)
        canvas.bind("<Control-MouseWheel>", lambda e: self._on_zoom(e.delta > 0))
        canvas.bind("<Control-Button-4>", lambda e: self._on_zoom(True))
        canvas.bind("<Control-Button-5>", lambda e: self._on_zoom(False))

    # -- drawing ------------------------------------------------------

    def _refresh(self) -> None:
        from PIL import ImageTk

        browser = self.controller.browser
        image = self.controller.annotator.render()
        if image is None and browser.image is not None:
            width, height = browser.image.size
            size = (
                max(1, int(width * browser.scale + 0.5)),
                max(1, int(height * browser.scale + 0.5)),
            )
            image = browser.image.convert("RGB").resize(size, Image.LANCZOS)
        if image is None:
            return
        self._photo = ImageTk.PhotoImage(image)
        self._canvas.delete("all")
        self._canvas.create_image(0, 0, anchor="nw", image=self._photo)
        self._canvas.configure(scrollregion=(0, 0, image.width, image.height))

    def _show_preview(self, image: Image.Image | None) -> None:
        from PIL import ImageTk

        if image is None or image.width == 0 or image.height == 0:
            self._preview_photo = None
            self._preview_label.configure(image="")
            return
        thumb = image.copy()
        thumb.thumbnail(PREVIEW_SIZE)
        self._preview_photo = ImageTk.PhotoImage(thumb)
        self._preview_label.configure(image=self._preview_photo, width=0, height=0)

    def _reload_list(self) -> None:
        browser = self.controller.browser
        self._listbox.delete(0, "end")
        for path in browser.images:
            mark = "☑" if browser.processed.get(path) else "☐"
            self._listbox.insert("end", f"{mark} {path.name}")
        if 0 <= browser.current_index < len(browser.images):
            self._listbox.selection_clear(0, "end")
            self._listbox.selection_set(browser.current_index)
            self._listbox.see(browser.current_index)

    # -- actions ------------------------------------------------------

    def _open_directory(self) -> None:
        if self.controller.open_directory():
            self._reload_list()
            self._refresh()

    def _use_yolo(self) -> None:
        if self.controller.use_yolo_format():
            self._reload_list()
            self._refresh()

    def _set_mode(self, mode: LabelMode) -> None:
        self.controller.set_mode(mode)
        self._cls_panel.pack_forget()
        self._detection_panel.pack_forget()
        panel = self._cls_panel if mode is LabelMode.CLS else self._detection_panel
        panel.pack(fill="both", expand=True)

    def _exit(self) -> None:
        try:
            SETTINGS_FILE.write_text(
                json.dumps({"windowGeometry": self.root.geometry()}), encoding="utf-8"
            )
        except OSError:
            pass
        self.root.destroy()

    def _navigate(self, step: Callable[[], None]) -> None:
        step()
        self._reload_list()
        self._refresh()

    def _toggle_labeling(self) -> None:
        self.controller.browser.toggle_labeling()
        self._reload_list()
        self._refresh()

    def _choose_save(self) -> None:
        self.controller.browser.ensure_save_path()
        self._reload_list()

    def _delete_labels(self) -> None:
        self.controller.browser.delete_current_labels()
        self._reload_list()

    def _on_list_select(self, _event) -> None:
        selection = self._listbox.curselection()
        if selection and self.controller.browser.select(selection[0]):
            self._refresh()

    def _on_auto_cut(self) -> None:
        state = "normal" if self._auto_cut_var.get() else "disabled"
        self._width_entry.configure(state=state)
        self._height_entry.configure(state=state)

    def _on_sure(self) -> None:
        self.controller.classifier.configure_crop(
            self._auto_cut_var.get(), self._width_entry.get(), self._height_entry.get()
        )

    def _create_label(self) -> None:
        try:
            self.controller.classifier.create_label()
        except ClassifierError as exc:
            self.controller.status(str(exc))
        self._refresh()

    # -- canvas events ------------------------------------------------

    def _on_canvas_resize(self, event) -> None:
        self.controller.browser.viewport_size = (max(1, event.width), max(1, event.height))

    def _canvas_point(self, event) -> tuple[float, float]:
        return (self._canvas.canvasx(event.x), self._canvas.canvasy(event.y))

    def _on_press(self, event, button: MouseButton) -> None:
        self._canvas.focus_set()
        self.controller.annotator.press(*self._canvas_point(event), button)
        self._refresh()

    def _on_move(self, event) -> None:
        if self.controller.annotator.is_drawing:
            self.controller.annotator.move(*self._canvas_point(event))
            self._refresh()

    def _on_release(self, event, button: MouseButton) -> None:
        self.controller.annotator.release(*self._canvas_point(event), button)
        self._refresh()

    def _on_key(self, event) -> None:
        keys = {"Escape": Key.ESCAPE, "Delete": Key.DELETE, "BackSpace": Key.BACKSPACE}
        self.controller.annotator.key(keys.get(event.keysym, Key.OTHER))
        self._refresh()

    def _on_zoom(self, zoom_in: bool) -> None:
        if self.controller.browser.zoom(zoom_in) is not None:
            self._refresh()

    def run(self) -> None:
        self.root.mainloop()


def main(argv: list[str] | None = None) -> int:
    """Start the labelling window."""
    parser = argparse.ArgumentParser(prog="datasetmaker", description="Image dataset labelling tool")
    parser.parse_args(argv)

    import tkinter as tk

    root = tk.Tk()
    MainWindow(root).run()
    return 0