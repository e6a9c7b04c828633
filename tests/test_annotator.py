from PIL import Image

from datasetmaker.annotator import Annotator, Key, MouseButton
from datasetmaker.model import DetectionLabel, LabelMode, Rect, Session


def _make(mode=LabelMode.CLS, labeling=True, scale=1.0):
    session = Session(label_mode=mode, is_labeling=labeling)
    messages = []
    previews = []
    annotator = Annotator(session, messages.append, lambda: previews.append(True))
    annotator.set_image(Image.new("RGB", (80, 60), (255, 255, 255)), scale)
    return session, annotator, messages, previews


def test_press_without_mode_reports_status():
    session, annotator, messages, _ = _make(mode=None)
    annotator.press(10, 10, MouseButton.LEFT)
    assert messages == ["标签模式: 请先选择标签模式"]
    assert annotator.is_drawing is False


def test_press_ignored_when_not_labeling():
    _, annotator, messages, _ = _make(labeling=False)
    annotator.press(10, 10, MouseButton.LEFT)
    assert messages == []
    assert annotator.render() is None


def test_drag_creates_pending_label_in_image_coordinates():
    _, annotator, messages, _ = _make(scale=2.0)
    annotator.press(20, 40, MouseButton.LEFT)
    assert annotator.is_drawing
    annotator.move(50, 70)
    annotator.release(60, 100, MouseButton.LEFT)
    expected = Rect.from_points(annotator.to_image_point(20, 40), annotator.to_image_point(60, 100))
    assert annotator.tmp_label.rect == expected
    assert annotator.is_drawing is False
    assert messages[-1] == "标签模式: 标签创建成功"


def test_second_drag_blocked_while_pending_label_exists():
    _, annotator, _, _ = _make()
    annotator.press(5, 5, MouseButton.LEFT)
    annotator.release(25, 25, MouseButton.LEFT)
    pending = annotator.tmp_label.rect
    annotator.press(40, 40, MouseButton.LEFT)
    annotator.release(50, 50, MouseButton.LEFT)
    assert annotator.tmp_label.rect == pending


def test_clicking_label_selects_it():
    session, annotator, messages, previews = _make()
    session.labels.append(DetectionLabel("car", Rect.from_points((10, 10), (40, 40))))
    session.labels.append(DetectionLabel("dog", Rect.from_points((50, 10), (70, 40))))
    annotator.press(55, 20, MouseButton.RIGHT)
    assert [label.name for label in session.selected()] == ["dog"]
    assert "标签模式: 选中标签 'dog'" in messages
    assert annotator.label_selected
    assert previews


def test_render_keeps_size_and_colours_labels():
    session, annotator, _, _ = _make()
    selected = DetectionLabel("a", Rect.from_points((10, 20), (30, 50)), is_selected=True)
    plain = DetectionLabel("b", Rect.from_points((40, 20), (60, 50)))
    session.labels.extend([selected, plain])
    shown = annotator.render()
    assert shown.size == annotator.image.size
    assert shown.getpixel((10, 35)) == (255, 0, 0)
    assert shown.getpixel((40, 35)) == (0, 0, 255)
    assert annotator.original.getpixel((10, 35)) == (255, 255, 255)


def test_render_scales_output():
    _, annotator, _, _ = _make(scale=0.5)
    shown = annotator.render()
    assert shown.width * 2 == annotator.image.width
    assert shown.height * 2 == annotator.image.height


def test_cls_mode_preview_is_crop_of_selected_label():
    session, annotator, _, _ = _make()
    rect = Rect.from_points((10, 20), (30, 50))
    session.labels.append(DetectionLabel("a", rect, is_selected=True))
    annotator.render()
    assert annotator.preview.size == (rect.width, rect.height)


def test_detection_mode_has_no_preview():
    session, annotator, _, _ = _make(mode=LabelMode.DETECTION)
    session.labels.append(DetectionLabel("a", Rect.from_points((10, 20), (30, 50)), is_selected=True))
    annotator.render()
    assert annotator.preview is None


def test_delete_key_removes_selected_labels():
    session, annotator, _, _ = _make()
    session.labels.append(DetectionLabel("a", Rect.from_points((10, 10), (20, 20)), is_selected=True))
    session.labels.append(DetectionLabel("b", Rect.from_points((30, 30), (40, 40))))
    annotator.key(Key.DELETE)
    assert [label.name for label in session.labels] == ["b"]


def test_backspace_needs_a_clicked_selection():
    session, annotator, _, _ = _make()
    session.labels.append(DetectionLabel("a", Rect.from_points((10, 10), (20, 20)), is_selected=True))
    annotator.key(Key.BACKSPACE)
    assert len(session.labels) == 1
    annotator.press(15, 15, MouseButton.RIGHT)
    annotator.key(Key.BACKSPACE)
    assert session.labels == []


def test_escape_while_drawing_clears_state():
    session, annotator, _, _ = _make()
    session.labels.append(DetectionLabel("a", Rect.from_points((60, 50), (70, 55)), is_selected=True))
    annotator.press(10, 10, MouseButton.LEFT)
    annotator.move(20, 20)
    annotator.key(Key.ESCAPE)
    assert annotator.first_point == (0, 0)
    assert annotator.current_point == (0, 0)
    assert annotator.tmp_label.rect.is_empty()
    assert session.selected() == []


def test_label_at_and_point_conversion():
    session, annotator, _, _ = _make(scale=2.0)
    label = DetectionLabel("a", Rect.from_points((10, 10), (20, 20)))
    session.labels.append(label)
    assert annotator.label_at(annotator.to_image_point(30, 30)) is label
    assert annotator.label_at(annotator.to_image_point(100, 100)) is None


def test_current_image_converts_to_rgb():
    _, annotator, _, _ = _make()
    annotator.set_image(Image.new("RGBA", (4, 4), (1, 2, 3, 4)), 1.0)
    image = annotator.current_image()
    assert image.mode == "RGB"
    assert image.getpixel((0, 0)) == (1, 2, 3)
    annotator.set_image(None, 1.0)
    assert annotator.current_image() is None