import pytest

from companygrow.domain.skills.matching import (
    analyze_requirements, availability_score, course_relevance, gap_severity, match_label,
    recommendation_score, round_half_up, sort_analysis, workload_label,
)

REQS = [
    {"skill_id": 1, "skill": "React", "required_level": 4, "is_mandatory": True},
    {"skill_id": 2, "skill": "Node.js", "required_level": 3, "is_mandatory": True},
    {"skill_id": 3, "skill": "Docker", "required_level": 2, "is_mandatory": False},
]


def test_round_half_up():
    assert [round_half_up(x) for x in (0.5, 1.5, 2.5, 66.666, 33.333)] == [1, 2, 3, 67, 33]


@pytest.mark.parametrize("pct, label", [(100, "Excellent"), (90, "Excellent"), (89, "Good"),
                                        (70, "Good"), (50, "Fair"), (49, "Poor")])
def test_match_label(pct, label):
    assert match_label(pct) == label


def test_gap_severity_and_workload():
    assert [gap_severity(g) for g in (4, 3, 2, 1, 0)] == ["Critical", "Critical", "High", "Medium", "Low"]
    assert [workload_label(n) for n in (0, 1, 2, 3, 4, 5)] == [
        "Available", "Light load", "Moderate load", "Heavy load", "Heavy load", "Overloaded",
    ]
    assert [availability_score(n) for n in (0, 1, 3, 4, 6)] == [100, 75, 25, 0, 0]


def test_analyze_full_match_with_strengths():
    a = analyze_requirements(REQS, {1: 5, 2: 3, 3: 2})
    assert a["match_percentage"] == 100
    assert a["mandatory_match_percentage"] == 100
    assert a["is_qualified"] is True
    assert a["match_label"] == "Excellent"
    assert a["skill_gaps"] == []
    assert [(s["skill"], s["surplus"]) for s in a["strengths"]] == [("React", 1)]


def test_analyze_missing_mandatory():
    a = analyze_requirements(REQS, {2: 1, 3: 4})
    assert a["match_percentage"] == 33
    assert a["mandatory_match_percentage"] == 0
    assert a["is_qualified"] is False
    gaps = {g["skill"]: (g["gap"], g["severity"]) for g in a["skill_gaps"]}
    assert gaps == {"React": (4, "Critical"), "Node.js": (2, "High")}


def test_analyze_without_mandatory_requirements():
    a = analyze_requirements([{**REQS[2]}], {})
    assert a["mandatory_match_percentage"] == 100
    assert a["is_qualified"] is True
    assert a["match_percentage"] == 0


def test_sort_analysis_is_stable():
    rows = [
        {"id": 1, "is_qualified": False, "match_percentage": 90},
        {"id": 2, "is_qualified": True, "match_percentage": 60},
        {"id": 3, "is_qualified": True, "match_percentage": 60},
        {"id": 4, "is_qualified": True, "match_percentage": 80},
    ]
    assert [r["id"] for r in sort_analysis(rows)] == [4, 2, 3, 1]


def test_recommendation_score():
    assert recommendation_score(100, 100) == 100.0
    assert recommendation_score(67, 75) == 69.4
    assert recommendation_score(0, 0) == 0.0


def test_course_relevance():
    gaps = {1: {"gap": 2, "is_mandatory": True}, 3: {"gap": 1, "is_mandatory": False}}
    skills = [
        {"skill_id": 1, "skill": "React", "skill_level": 4},
        {"skill_id": 3, "skill": "Docker", "skill_level": 2},
        {"skill_id": 9, "skill": "Go", "skill_level": 5},
    ]
    score, addressed = course_relevance(skills, gaps)
    # React: min(4, 2) + 1 obligatorio; Docker: min(2, 1)
    assert score == 4
    assert addressed == ["React", "Docker"]
    assert course_relevance([], gaps) == (0, [])
