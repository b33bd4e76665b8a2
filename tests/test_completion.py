from structlog.testing import capture_logs

from src.portal.completion import toggle_completion


def _students():
    return [
        {"name": "Alice", "daysToComplete": 30, "totalCompleted": 4},
        {"name": "Bob", "daysToComplete": 10, "totalCompleted": 0},
    ]


def test_first_toggle_marks_complete_and_increments():
    result = toggle_completion({}, "2024-03-04", "s1", "Alice", _students())

    assert result.completion == {"2024-03-04": {"s1": True}}
    assert result.completed is True
    assert result.student_found is True
    assert result.students[0]["totalCompleted"] == 5
    assert result.students[1]["totalCompleted"] == 0


def test_toggle_twice_restores_original():
    completion = {"2024-03-01": {"x": True}}
    students = _students()

    once = toggle_completion(completion, "2024-03-04", "s1", "Alice", students)
    twice = toggle_completion(once.completion, "2024-03-04", "s1", "Alice", once.students)

    assert twice.completion["2024-03-04"]["s1"] is False
    assert twice.completion["2024-03-01"] == {"x": True}
    assert twice.students == students
    assert twice.completed is False


def test_toggle_from_true_decrements():
    result = toggle_completion({"2024-03-04": {"s1": True}}, "2024-03-04", "s1", "Alice", _students())
    assert result.completion["2024-03-04"]["s1"] is False
    assert result.students[0]["totalCompleted"] == 3


def test_dates_are_independent():
    first = toggle_completion({}, "2024-03-04", "s1", "Alice", _students())
    second = toggle_completion(first.completion, "2024-03-11", "s1", "Alice", first.students)

    assert second.completion["2024-03-04"] == {"s1": True}
    assert second.completion["2024-03-11"] == {"s1": True}
    assert second.students[0]["totalCompleted"] == 6


def test_inputs_not_mutated():
    completion = {"2024-03-04": {"s1": False}}
    students = _students()
    toggle_completion(completion, "2024-03-04", "s1", "Alice", students)

    assert completion == {"2024-03-04": {"s1": False}}
    assert students == _students()


def test_unknown_student_still_flips_but_skips_counter():
    students = _students()
    with capture_logs() as logs:
        result = toggle_completion({}, "2024-03-04", "s1", "Zed", students)

    assert result.completion == {"2024-03-04": {"s1": True}}
    assert result.student_found is False
    assert result.students == students
    assert any(e["event"] == "toggle_student_not_found" for e in logs)


def test_uncompleting_never_drives_counter_negative():
    # Bob's counter was reset to 0 while a slot was still marked done
    completion = {"2024-03-04": {"s1": True}}
    result = toggle_completion(completion, "2024-03-04", "s1", "Bob", _students())

    assert result.completed is False
    assert result.students[1]["totalCompleted"] == 0
