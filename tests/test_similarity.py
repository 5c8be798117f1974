from conftest import DAY_MS, NOW, make_task

from skillrpg.tasks.models import Assignee, AssigneeSkill, TaskStatus
from skillrpg.tasks.similarity import (
    count_similar_for_task_line,
    jaccard,
    repetition_factor_from_tasks,
    tokenize,
)


def _count(tasks, **overrides):
    params = dict(fighter_id="f1", skill_id="s1", difficulty=3, title="Night recon patrol", now=NOW)
    params.update(overrides)
    return count_similar_for_task_line(tasks, **params)


def test_tokenize_strips_punctuation_and_short_tokens():
    assert tokenize("Rapid, Response! Звіт-42?") == {"rapid", "response", "звіт"}


def test_tokenize_is_a_set_and_handles_empty():
    assert tokenize("patrol Patrol PATROL") == {"patrol"}
    assert tokenize("") == set()
    assert tokenize(None) == set()


def test_jaccard_conventions():
    a = {"night", "recon"}
    b = {"recon", "patrol", "route"}
    assert jaccard(set(), set()) == 1.0
    assert jaccard(a, a) == 1.0
    assert jaccard(a, b) == jaccard(b, a) == 0.25
    assert jaccard(a, set()) == 0.0


def test_counts_only_credited_statuses():
    tasks = [
        make_task(status=TaskStatus.DONE),
        make_task(status=TaskStatus.VALIDATION, created_at=NOW - 2 * DAY_MS),
        make_task(status=TaskStatus.TODO),
        make_task(status=TaskStatus.IN_PROGRESS),
        make_task(status=TaskStatus.ARCHIVED),
    ]
    assert _count(tasks) == 2


def test_window_uses_first_available_timestamp():
    # approved long ago, created recently: approved_at wins -> outside window
    old_approval = make_task(created_at=NOW - DAY_MS, approved_at=NOW - 10 * DAY_MS)
    recent_submission = make_task(created_at=NOW - 10 * DAY_MS, submitted_at=NOW - DAY_MS)
    assert _count([old_approval]) == 0
    assert _count([recent_submission]) == 1
    assert _count([make_task(created_at=NOW - 4 * DAY_MS)]) == 0
    assert _count([make_task(created_at=NOW - 4 * DAY_MS)], window_days=5) == 1


def test_adjacent_difficulty_counts():
    tasks = [make_task(difficulty=2), make_task(difficulty=4, created_at=NOW - 2), make_task(difficulty=5)]
    assert _count(tasks) == 2


def test_fighter_and_skill_must_be_on_same_assignee():
    task = make_task()
    task.assignees = [
        Assignee("f1", [AssigneeSkill("other", "c1", 10)]),
        Assignee("f2", [AssigneeSkill("s1", "c1", 10)]),
    ]
    assert _count([task]) == 0


def test_title_similarity_threshold():
    assert _count([make_task(title="Night recon patrol 2")]) == 1
    assert _count([make_task(title="Night patrol")]) == 1  # 2/3
    assert _count([make_task(title="Morning recon drill")]) == 0  # 1/5


def test_repetition_factor_defaults_and_tuning():
    tasks = [make_task(created_at=NOW - i - 1) for i in range(5)]
    result = repetition_factor_from_tasks(tasks, "f1", "s1", 3, "Night recon patrol", now=NOW)
    assert result.count == 5
    assert abs(result.factor - 0.8) < 1e-9

    tuned = repetition_factor_from_tasks(
        tasks, "f1", "s1", 3, "Night recon patrol", free_quota=1, step=0.5, min_factor=0.25, now=NOW
    )
    assert tuned.factor == 0.25
