"""
Sample data for development.

Loaded into an empty in-memory store at startup (SEED_SAMPLE_DATA=true),
or into MongoDB with ``python scripts/seed_database.py``.
"""

import logging
from datetime import timedelta

from careerguide.core.auth import hash_password
from careerguide.db.base import COLLECTIONS, DocumentStore
from careerguide.utils.helpers import utc_now, utc_now_iso

logger = logging.getLogger(__name__)


def _sample_users() -> list:
    now = utc_now_iso()
    base = {
        "status": "active",
        "isVerified": True,
        "verificationStatus": "verified",
        "profileCompleted": True,
        "createdAt": now,
        "updatedAt": now,
    }
    return [
        {
            **base,
            "email": "admin@careerguide.ls",
            "password": hash_password("admin123"),
            "name": "System Administrator",
            "role": "admin",
        },
        {
            **base,
            "email": "test@test.com",
            "password": hash_password("test123"),
            "name": "Development Test User",
            "role": "student",
            "skills": ["Python", "SQL"],
            "course": "Computer Science",
            "experience": 1,
            "preferredLocation": "Maseru, Lesotho",
        },
    ]


SAMPLE_INSTITUTIONS = [
    {
        "name": "National University of Lesotho",
        "email": "admissions@nul.ls",
        "description": "Premier higher education institution in Lesotho",
        "location": "Roma, Lesotho",
        "contactInfo": {"phone": "+266 22340601", "address": "P.O. Roma 180, Lesotho"},
        "status": "active",
        "verificationStatus": "verified",
    },
    {
        "name": "Limkokwing University of Creative Technology",
        "email": "info@limkokwing.ls",
        "description": "Innovative university focusing on creative technology",
        "location": "Maseru, Lesotho",
        "contactInfo": {"phone": "+266 22317242", "address": "Kingsway Road, Maseru"},
        "status": "active",
        "verificationStatus": "verified",
    },
]

# Faculties and courses are attached to the first institution
SAMPLE_FACULTIES = [
    {"name": "Faculty of Science & Technology", "description": "Sciences, computing and engineering"},
    {"name": "Faculty of Social Sciences", "description": "Business, economics and commerce"},
]

SAMPLE_COURSES = [
    {
        "name": "Computer Science",
        "code": "BSC-CS",
        "description": "Bachelor of Science in Computer Science",
        "requirements": ["Mathematics", "Physics", "English"],
        "minimumGrade": "C",
        "duration": "4 years",
        "fees": 25000,
        "seats": 50,
        "availableSeats": 50,
        "status": "open",
        "faculty": 0,
    },
    {
        "name": "Business Administration",
        "code": "BBA",
        "description": "Bachelor of Business Administration",
        "requirements": ["Mathematics", "Commerce", "English"],
        "minimumGrade": "C",
        "duration": "3 years",
        "fees": 20000,
        "seats": 100,
        "availableSeats": 100,
        "status": "open",
        "faculty": 1,
    },
]


async def seed_store(store: DocumentStore) -> bool:
    """
    Load sample data unless the store already has users.

    Returns True if data was written.
    """
    if await store.count(COLLECTIONS["users"]) > 0:
        logger.info("Store already has data, skipping seed")
        return False

    now = utc_now_iso()
    users = _sample_users()
    for user in users:
        await store.create(COLLECTIONS["users"], user)

    institutions = []
    for data in SAMPLE_INSTITUTIONS:
        institutions.append(await store.create(COLLECTIONS["institutions"], {**data, "createdAt": now}))
    main_institution = institutions[0]

    faculties = []
    for data in SAMPLE_FACULTIES:
        faculties.append(await store.create(
            COLLECTIONS["faculties"],
            {**data, "institutionId": main_institution["id"], "createdAt": now},
        ))

    deadline = (utc_now() + timedelta(days=90)).isoformat()
    for data in SAMPLE_COURSES:
        course = {k: v for k, v in data.items() if k != "faculty"}
        course.update({
            "institutionId": main_institution["id"],
            "facultyId": faculties[data["faculty"]]["id"],
            "applicationDeadline": deadline,
            "createdAt": now,
        })
        await store.create(COLLECTIONS["courses"], course)

    logger.info(
        "Seeded %d users, %d institutions, %d courses",
        len(users), len(institutions), len(SAMPLE_COURSES),
    )
    return True
