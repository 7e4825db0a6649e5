"""Seed the training catalog through the API with a short-lived admin token."""
import sys
import uuid
from datetime import timedelta

import httpx

from academy.kernel.identity.jwt import JWTManager, StaffRole

BASE = "http://localhost:8000/api/v1"

CATALOG = [
    # Foundation: Culture & Values
    {"tier": "foundation", "title": "Welcome to the Family", "content_type": "reading", "order_index": 0},
    {"tier": "foundation", "title": "Our Values in Practice", "content_type": "reading", "order_index": 1},
    # Level 1 Food Hygiene
    {"tier": "L1", "title": "Personal Hygiene Basics", "content_type": "reading", "order_index": 0},
    {
        "tier": "L1",
        "title": "Level 1 Knowledge Check",
        "content_type": "quiz",
        "order_index": 1,
        "questions": [
            {"text": "How long should you wash your hands?", "options": ["5 seconds", "20 seconds", "1 minute"], "correct_index": 1},
            {"text": "Where should raw meat be stored?", "options": ["Top shelf", "Bottom shelf", "Anywhere"], "correct_index": 1},
            {"text": "What is the danger zone?", "options": ["0-5C", "8-63C", "70-100C"], "correct_index": 1},
            {"text": "When must you report illness?", "options": ["Before your shift", "After 48 hours", "Never"], "correct_index": 0},
            {"text": "Which board is for raw poultry?", "options": ["Yellow", "Green", "White"], "correct_index": 0},
        ],
    },
    # Level 2 Food Hygiene
    {"tier": "L2", "title": "Cross-Contamination Control", "content_type": "reading", "order_index": 0},
    {
        "tier": "L2",
        "title": "Level 2 Knowledge Check",
        "content_type": "quiz",
        "order_index": 1,
        "questions": [
            {"text": "Minimum core cooking temperature?", "options": ["55C", "75C", "100C"], "correct_index": 1},
            {"text": "Hot holding minimum?", "options": ["63C", "40C", "50C"], "correct_index": 0},
            {"text": "Chilled food maximum?", "options": ["8C", "12C", "15C"], "correct_index": 0},
            {"text": "How many allergens must be declared?", "options": ["8", "14", "20"], "correct_index": 1},
        ],
    },
    # Level 3 Food Hygiene
    {"tier": "L3", "title": "HACCP Principles", "content_type": "reading", "order_index": 0},
    {
        "tier": "L3",
        "title": "Supervising Food Safety",
        "content_type": "quiz",
        "order_index": 1,
        "is_capstone": True,
        "questions": [
            {"text": "What does CCP stand for?", "options": ["Critical Control Point", "Core Cooking Process", "Cleaning Check Plan"], "correct_index": 0},
            {"text": "Who verifies the HACCP plan?", "options": ["Any guest", "The supervisor", "Nobody"], "correct_index": 1},
        ],
    },
]


def main() -> int:
    token, _, _ = JWTManager().create_access_token(
        staff_id=uuid.uuid4(),
        email="seed@localhost",
        role=StaffRole.ADMIN.value,
        name="Catalog Seeder",
        expires_delta=timedelta(minutes=5),
    )
    headers = {"Authorization": f"Bearer {token}"}
    client = httpx.Client(timeout=15)

    existing = client.get(f"{BASE}/training/courses", headers=headers)
    if existing.status_code != 200:
        print(f"List courses: {existing.status_code} {existing.text}")
        return 1
    if existing.json():
        print(f"Catalog already has {len(existing.json())} courses, nothing to do")
        return 0

    for course in CATALOG:
        r = client.post(f"{BASE}/training/courses", json=course, headers=headers)
        if r.status_code != 201:
            print(f"  FAILED {course['title']}: {r.status_code} {r.text}")
            return 1
        print(f"  [{course['tier']}] {course['title']}")

    print(f"\nSeeded {len(CATALOG)} courses.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
