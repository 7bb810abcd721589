# scripts/seed.py
import sys
from pathlib import Path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sqlalchemy import select
from companygrow.db import SessionLocal, engine
from companygrow.db.base import Base
from companygrow.models.app_setting import AppSetting
from companygrow.models.badge import Badge
from companygrow.models.course import Course
from companygrow.models.leaderboard_achievement import LeaderboardAchievement
from companygrow.models.skill import Skill
from companygrow.models.user import User
from companygrow.security import get_password_hash

SETTINGS = [
    # key,                               value,             description
    ("SYSTEM_NAME",                      "CompanyGrow Pro", "System display name"),
    ("MAX_COURSE_ENROLLMENTS",           "5",               "Maximum concurrent course enrollments per user"),
    ("TOKENS_PER_CURRENCY_UNIT",         "10",              "Tokens credited per currency unit on token purchases"),
    ("TOKEN_REWARD_COURSE_COMPLETION",   "100",             "Tokens awarded for completing a course"),
    ("TOKEN_REWARD_PROJECT_COMPLETION",  "150",             "Tokens awarded for completing a project"),
]

SKILLS = [
    ("JavaScript", "Programming", "Modern JavaScript development including ES6+"),
    ("React", "Frontend", "React.js library for building user interfaces"),
    ("Node.js", "Backend", "Server-side JavaScript runtime"),
    ("Python", "Programming", "General-purpose programming language"),
    ("SQL", "Database", "Structured Query Language for database management"),
    ("AWS", "Cloud", "Amazon Web Services cloud platform"),
    ("Docker", "DevOps", "Containerization platform"),
    ("Git", "Version Control", "Distributed version control system"),
    ("Machine Learning", "AI/ML", "Machine learning algorithms and techniques"),
    ("UX Design", "Design", "User experience design principles"),
    ("Agile Methodology", "Management", "Agile project management practices"),
    ("TypeScript", "Programming", "Typed superset of JavaScript"),
    ("PostgreSQL", "Database", "Advanced open-source relational database"),
    ("Kubernetes", "DevOps", "Container orchestration platform"),
    ("Team Leadership", "Management", "Leading and managing development teams"),
]

# name, description, badge_type, criteria, token_reward, rarity
BADGES = [
    ("Course Graduate", "Completed a course", "course_completion", None, 50, "common"),
    ("Top Scorer", "Completed a course with a final score of 90 or more", "course_completion", "score>=90", 100, "rare"),
    ("Team Player", "Excellent collaboration and teamwork", "social", None, 100, "common"),
    ("Mentor", "Helped others grow and develop", "social", None, 125, "uncommon"),
    ("Innovation Leader", "Led successful innovative projects", "leadership", None, 300, "epic"),
    ("Cloud Expert", "Master of cloud technologies", "skill", None, 175, "uncommon"),
]

# name, description, type, criteria_value, points_reward
ACHIEVEMENTS = [
    ("First Steps", "Earn your first 100 points", "points_milestone", 100, 10),
    ("Rising Star", "Earn 1000 points", "points_milestone", 1000, 50),
    ("Point Legend", "Earn 10000 points", "points_milestone", 10000, 200),
    ("Eager Learner", "Complete your first course", "course_completion", 1, 25),
    ("Scholar", "Complete 5 courses", "course_completion", 5, 100),
    ("Delivered", "Complete your first project", "project_completion", 1, 25),
    ("On Fire", "Keep a 7-day activity streak", "streak", 7, 50),
    ("Unstoppable", "Keep a 30-day activity streak", "streak", 30, 200),
    ("Podium", "Reach the top 3 of the leaderboard", "ranking", 3, 100),
    ("Jack of All Trades", "Add 5 skills to your profile", "skill_count", 5, 25),
    ("Master", "Reach level 5 in a skill", "skill_mastery", 1, 50),
    ("Certified", "Get 3 skills verified", "verified_skills", 3, 50),
    ("Collector", "Earn 3 badges", "badge_count", 3, 50),
]

# email, password, first, last, role, department, position
USERS = [
    ("admin@companygrow.com", "admin123", "Admin", "Smith", "admin", "IT", "CTO"),
    ("sarah.johnson@company.com", "password123", "Sarah", "Johnson", "manager", "Engineering", "Engineering Manager"),
    ("john.doe@companygrow.com", "password123", "John", "Doe", "employee", "Engineering", "Frontend Developer"),
    ("lisa.garcia@company.com", "password123", "Lisa", "Garcia", "employee", "Engineering", "Backend Developer"),
    ("emily.brown@company.com", "password123", "Emily", "Brown", "employee", "Design", "UX Designer"),
]

# title, category, difficulty, hours, instructor, price
COURSES = [
    ("Advanced React Development", "Frontend", "advanced", 40, "Sarah Johnson", 299.99),
    ("Node.js Backend Mastery", "Backend", "intermediate", 35, "Lisa Garcia", 249.99),
    ("Cloud Infrastructure with AWS", "Cloud", "intermediate", 45, "David Wilson", 349.99),
    ("UX Design Fundamentals", "Design", "beginner", 25, "Emily Brown", 199.99),
    ("Modern JavaScript ES6+", "Programming", "beginner", 30, "John Doe", 179.99),
]


def upsert_setting(db, key, value, description):
    row = db.execute(select(AppSetting).where(AppSetting.setting_key == key)).scalar_one_or_none()
    if row:
        row.setting_value = value
        row.description = description
    else:
        db.add(AppSetting(setting_key=key, setting_value=value, description=description))


def upsert_skill(db, name, category, description):
    row = db.execute(select(Skill).where(Skill.name == name)).scalar_one_or_none()
    if row:
        row.category = category
        row.description = description
    else:
        db.add(Skill(name=name, category=category, description=description))


def upsert_badge(db, name, description, badge_type, criteria, token_reward, rarity):
    row = db.execute(select(Badge).where(Badge.name == name)).scalar_one_or_none()
    if row is None:
        row = Badge(name=name)
        db.add(row)
    row.description = description
    row.badge_type = badge_type
    row.criteria = criteria
    row.token_reward = token_reward
    row.rarity = rarity


def upsert_achievement(db, name, description, achievement_type, criteria_value, points_reward):
    row = db.execute(
        select(LeaderboardAchievement).where(LeaderboardAchievement.name == name)
    ).scalar_one_or_none()
    if row is None:
        row = LeaderboardAchievement(name=name)
        db.add(row)
    row.description = description
    row.achievement_type = achievement_type
    row.criteria_value = criteria_value
    row.points_reward = points_reward


def ensure_user(db, email, password, first, last, role, department, position):
    # usuarios existentes no se tocan (no pisar contraseñas)
    if db.execute(select(User.id).where(User.email == email)).first():
        return
    db.add(User(
        email=email, password=get_password_hash(password), first_name=first, last_name=last,
        role=role, department=department, position=position,
    ))


def ensure_course(db, title, category, difficulty, hours, instructor, price):
    if db.execute(select(Course.id).where(Course.title == title)).first():
        return
    db.add(Course(
        title=title, category=category, difficulty_level=difficulty, duration_hours=hours,
        instructor_name=instructor, price=price, course_materials=[], learning_objectives=[],
    ))


def main():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        for row in SETTINGS:
            upsert_setting(db, *row)
        for row in SKILLS:
            upsert_skill(db, *row)
        for row in BADGES:
            upsert_badge(db, *row)
        for row in ACHIEVEMENTS:
            upsert_achievement(db, *row)
        for row in USERS:
            ensure_user(db, *row)
        for row in COURSES:
            ensure_course(db, *row)
        db.commit()
        print("Seed OK")
    finally:
        db.close()


if __name__ == "__main__":
    main()
