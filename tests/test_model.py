import pytest

from datasetmaker.model import DetectionLabel, LabelMode, Rect, Session


def test_from_points_normalises_corner_order():
    assert Rect.from_points((30, 50), (10, 20)) == Rect.from_points((10, 20), (30, 50))
    rect = Rect.from_points((30, 50), (10, 20))
    assert rect.top_left() == (10, 20)
    assert rect.box() == (10, 20, 30, 50)


@pytest.mark.parametrize(
    "point, inside",
    [((10, 20), True), ((29, 49), True), ((30, 20), False), ((10, 50), False), ((9, 20), False)],
)
def test_contains_has_exclusive_far_edges(point, inside):
    rect = Rect.from_points((10, 20), (30, 50))
    assert rect.contains(point) is inside


def test_emptiness():
    assert Rect().is_empty()
    assert Rect.from_points((5, 5), (5, 9)).is_empty()
    assert not Rect.from_points((5, 5), (6, 6)).is_empty()


def test_default_session_values():
    session = Session()
    assert session.save_format == "yolo"
    assert session.save_path == ""
    assert session.label_mode is None
    assert session.is_labeling is False
    assert session.labels == []


def test_label_mode_values():
    assert LabelMode("cls") is LabelMode.CLS
    assert LabelMode("detection") is LabelMode.DETECTION


def _session_with_labels():
    session = Session()
    session.labels.extend(
        DetectionLabel(name, Rect.from_points((i, i), (i + 5, i + 5))) for i, name in enumerate("abc")
    )
    return session


def test_select_leaves_only_one_selected():
    session = _session_with_labels()
    session.select(session.labels[0])
    session.select(session.labels[2])
    assert [label.name for label in session.selected()] == ["c"]


def test_clear_selection():
    session = _session_with_labels()
    session.select(session.labels[1])
    session.clear_selection()
    assert session.selected() == []


def test_delete_selected_removes_and_counts():
    session = _session_with_labels()
    session.select(session.labels[1])
    assert session.delete_selected() == 1
    assert [label.name for label in session.labels] == ["a", "c"]
    assert session.delete_selected() == 0


def test_has_unsaved():
    session = _session_with_labels()
    assert session.has_unsaved()
    for label in session.labels:
        label.is_saved = True
    assert not session.has_unsaved()
    assert not Session().has_unsaved()


def test_save_id_counts_from_one_and_resets():
    session = Session()
    assert [session.next_save_id() for _ in range(3)] == [1, 2, 3]
    session.reset_save_id()
    assert session.next_save_id() == 1