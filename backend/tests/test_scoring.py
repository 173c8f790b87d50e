"""
Audit Quiz Platform - Scoring and Reconciliation Helper Tests
"""
from types import SimpleNamespace

from auditquiz.schemas.audit import OptionInput
from auditquiz.services.audit import diff_children, pad_options
from auditquiz.services.scoring import (
    ResolvedAnswer,
    aggregate_scores,
    category_max_score,
    category_percentage,
    estimate_category_scores,
)


def _category(category_id: str, questions: dict[str, list[tuple[str, int]]]):
    return SimpleNamespace(
        id=category_id,
        questions=[
            SimpleNamespace(
                id=question_id,
                options=[SimpleNamespace(id=oid, points=points) for oid, points in options],
            )
            for question_id, options in questions.items()
        ],
    )


def test_aggregate_scores_sums_per_category_in_first_seen_order():
    breakdown = aggregate_scores([
        ResolvedAnswer("q1", "o1", "marketing", 2),
        ResolvedAnswer("q2", "o2", "sales", 5),
        ResolvedAnswer("q3", "o3", "marketing", 4),
    ])
    assert breakdown.total_score == 11
    assert list(breakdown.category_scores.items()) == [("marketing", 6), ("sales", 5)]


def test_aggregate_scores_empty():
    breakdown = aggregate_scores([])
    assert breakdown.total_score == 0
    assert breakdown.category_scores == {}


def test_category_max_and_percentage():
    assert category_max_score(3) == 15
    assert category_percentage(9, 3) == 60.0
    assert category_percentage(1, 3) == 6.67
    assert category_percentage(0, 0) == 0.0


def test_estimate_ignores_unanswered_and_foreign_options():
    categories = [
        _category("sales", {
            "q1": [("q1-a", 1), ("q1-b", 4)],
            "q2": [("q2-a", 2), ("q2-b", 5)],
        }),
        _category("ops", {"q3": [("q3-a", 3)]}),
    ]
    estimates = estimate_category_scores(categories, {"q1": "q1-b", "q2": "q3-a"})

    sales, ops = estimates
    assert (sales.category_id, sales.score, sales.answered, sales.max_score) == ("sales", 4, 1, 10)
    assert sales.percentage == 40.0
    assert (ops.score, ops.answered, ops.percentage) == (0, 0, 0.0)


def test_estimate_matches_aggregation_when_complete():
    categories = [
        _category("sales", {"q1": [("a", 1), ("b", 3)], "q2": [("c", 5)]}),
        _category("ops", {"q3": [("d", 2)]}),
    ]
    answers = {"q1": "b", "q2": "c", "q3": "d"}

    estimates = estimate_category_scores(categories, answers)
    breakdown = aggregate_scores([
        ResolvedAnswer("q1", "b", "sales", 3),
        ResolvedAnswer("q2", "c", "sales", 5),
        ResolvedAnswer("q3", "d", "ops", 2),
    ])
    assert {e.category_id: e.score for e in estimates} == breakdown.category_scores
    assert sum(e.score for e in estimates) == breakdown.total_score


def test_pad_options_fills_to_five_with_defaults():
    specs = pad_options([OptionInput(text="Poor", points=1), OptionInput(text="Fair", points=2)])
    assert [(s.text, s.points) for s in specs] == [
        ("Poor", 1),
        ("Fair", 2),
        ("Option 3", 3),
        ("Option 4", 4),
        ("Option 5", 5),
    ]
    assert all(s.id is None for s in specs[2:])


def test_pad_options_keeps_full_list():
    options = [OptionInput(id=f"o{i}", text=f"T{i}", points=i) for i in range(1, 6)]
    specs = pad_options(options)
    assert [s.id for s in specs] == ["o1", "o2", "o3", "o4", "o5"]


def test_diff_children_update_create_delete():
    existing = [SimpleNamespace(id="c1"), SimpleNamespace(id="c2")]
    incoming = [
        SimpleNamespace(id="c1"),
        SimpleNamespace(id=None),
        SimpleNamespace(id="stranger"),
    ]
    pairs, removed = diff_children(existing, incoming)

    assert [current.id if current else None for current, _ in pairs] == ["c1", None, None]
    assert [child.id for child in removed] == ["c2"]


def test_diff_children_duplicate_id_matches_once():
    existing = [SimpleNamespace(id="c1")]
    pairs, removed = diff_children(existing, [SimpleNamespace(id="c1"), SimpleNamespace(id="c1")])

    assert pairs[0][0] is existing[0]
    assert pairs[1][0] is None
    assert removed == []
