"""
Cálculos puros de compatibilidad de skills: sin DB, fáciles de testear.

Un requisito es un dict con: skill_id, skill (nombre), required_level, is_mandatory.
Los niveles del usuario son un dict skill_id -> proficiency_level.
"""
from typing import Iterable, Mapping

MATCH_WEIGHT = 0.7
AVAILABILITY_WEIGHT = 0.3
AVAILABILITY_STEP = 25   # cada asignación activa resta 25 de disponibilidad


def round_half_up(x: float) -> int:
    return int(x + 0.5) if x >= 0 else -int(-x + 0.5)


def match_label(pct: float) -> str:
    if pct >= 90:
        return "Excellent"
    if pct >= 70:
        return "Good"
    if pct >= 50:
        return "Fair"
    return "Poor"


def gap_severity(gap: int) -> str:
    if gap >= 3:
        return "Critical"
    if gap >= 2:
        return "High"
    if gap >= 1:
        return "Medium"
    return "Low"


def workload_label(active_assignments: int) -> str:
    if active_assignments <= 0:
        return "Available"
    if active_assignments == 1:
        return "Light load"
    if active_assignments == 2:
        return "Moderate load"
    if active_assignments <= 4:
        return "Heavy load"
    return "Overloaded"


def availability_score(active_assignments: int) -> int:
    return max(0, 100 - AVAILABILITY_STEP * active_assignments)


def recommendation_score(match_percentage: float, availability: float) -> float:
    return round(MATCH_WEIGHT * match_percentage + AVAILABILITY_WEIGHT * availability, 1)


def analyze_requirements(requirements: Iterable[Mapping], user_levels: Mapping[int, int]) -> dict:
    reqs = list(requirements)
    total = len(reqs)
    met = mandatory = met_mandatory = 0
    gaps: list[dict] = []
    strengths: list[dict] = []

    for r in reqs:
        current = int(user_levels.get(r["skill_id"], 0) or 0)
        required = int(r["required_level"])
        is_mandatory = bool(r["is_mandatory"])
        ok = current >= required
        if is_mandatory:
            mandatory += 1
            if ok:
                met_mandatory += 1
        if ok:
            met += 1
            if current > required:
                strengths.append({
                    "skill_id": r["skill_id"],
                    "skill": r["skill"],
                    "required_level": required,
                    "current_level": current,
                    "surplus": current - required,
                })
        else:
            gap = required - current
            gaps.append({
                "skill_id": r["skill_id"],
                "skill": r["skill"],
                "required_level": required,
                "current_level": current,
                "gap": gap,
                "severity": gap_severity(gap),
                "is_mandatory": is_mandatory,
            })

    match_pct = round_half_up(100 * met / total) if total else 0
    mandatory_pct = round_half_up(100 * met_mandatory / mandatory) if mandatory else 100
    return {
        "match_percentage": match_pct,
        "mandatory_match_percentage": mandatory_pct,
        "is_qualified": mandatory_pct == 100,
        "match_label": match_label(match_pct),
        "skill_gaps": gaps,
        "strengths": strengths,
    }


def sort_analysis(rows: list[dict]) -> list[dict]:
    # calificados primero, luego por % de match DESC (orden estable)
    return sorted(rows, key=lambda r: (not r["is_qualified"], -r["match_percentage"]))


def course_relevance(course_skills: Iterable[Mapping], gaps: Mapping[int, Mapping]) -> tuple[int, list[str]]:
    """
    Relevancia de un curso frente a los gaps del usuario.
    course_skills: dicts con skill_id, skill, skill_level.
    gaps: skill_id -> {"gap": int, "is_mandatory": bool}.
    Un punto por nivel enseñado (tope: el gap) y +1 si el gap es obligatorio.
    """
    score = 0
    addressed: list[str] = []
    for cs in course_skills:
        g = gaps.get(cs["skill_id"])
        if not g:
            continue
        score += min(int(cs["skill_level"] or 0), int(g["gap"]))
        if g.get("is_mandatory"):
            score += 1
        addressed.append(cs["skill"])
    return score, addressed
