# Fichier: academy/db/initial_data.py
"""Données de démonstration: une formation d'arbitrage, ses examens et quelques comptes.

Le chargement est idempotent: une formation déjà présente (même titre) ou un
compte existant (même email) n'est pas recréé.
"""

import logging
from datetime import date

from sqlalchemy.orm import Session

from academy.core.config import settings
from academy.core.security import get_password_hash
from academy.crud import user_crud
from academy.models.catalog.course_model import Course, CourseType
from academy.models.catalog.exam_model import Exam, Question
from academy.models.catalog.formation_model import Formation, Part
from academy.models.user.user_model import User, UserRole

logger = logging.getLogger(__name__)

DEMO_FORMATION_TITLE = "Formation Initiale des Arbitres"

DEMO_PARTS = [
    {
        "title": "Partie 1: Les Fondamentaux",
        "exam": {
            "title": "Examen - Les Fondamentaux",
            "passing_score": 80,
            "questions": [
                ("Combien de joueurs y a-t-il dans une équipe de football sur le terrain?", ["10", "11", "12", "9"], 1),
                ("Que signifie un carton jaune?", ["Expulsion", "Avertissement", "Changement de joueur", "But"], 1),
                (
                    "Quelle est la durée d'un match de football standard?",
                    ["80 minutes", "90 minutes", "100 minutes", "120 minutes"],
                    1,
                ),
            ],
        },
        "courses": [
            {
                "title": "Introduction aux règles du jeu",
                "course_type": CourseType.VIDEO,
                "content": {"url": "https://www.youtube.com/embed/8ca4qNI4qYI"},
                "quick_test": [
                    (
                        "Quelle est la première règle du club?",
                        ["On ne parle pas du club", "Toujours être à l'heure", "Respecter l'adversaire"],
                        0,
                    ),
                ],
            },
            {
                "title": "Le hors-jeu expliqué",
                "course_type": CourseType.ARTICLE,
                "content": {
                    "body": (
                        "Le hors-jeu est une règle fondamentale du football. Un joueur est en position de "
                        "hors-jeu s'il est plus près de la ligne de but adverse que le ballon et "
                        "l'avant-dernier adversaire. Cette règle vise à empêcher les attaquants de rester "
                        "près du but adverse pour marquer facilement."
                    )
                },
                "quick_test": [
                    (
                        "Quand un joueur est-il hors-jeu?",
                        [
                            "Derrière le ballon",
                            "Plus près de la ligne de but que le ballon et l'avant-dernier adversaire",
                            "Quand il touche le ballon",
                        ],
                        1,
                    ),
                ],
            },
            {
                "title": "Gestion des cartons",
                "course_type": CourseType.PDF,
                "content": {"url": "path/to/document1.pdf"},
                "quick_test": [],
            },
        ],
    },
    {
        "title": "Partie 2: Stratégies Avancées",
        "exam": {
            "title": "Examen - Stratégies Avancées",
            "passing_score": 70,
            "questions": [
                ("Quelle formation est la plus défensive?", ["4-4-2", "4-3-3", "5-3-2", "3-5-2"], 2),
                (
                    "Qu'est-ce que le 'pressing'?",
                    ["Une passe longue", "Une technique de tir", "Une tactique pour récupérer le ballon", "Une célébration"],
                    2,
                ),
            ],
        },
        "courses": [
            {
                "title": "Stratégies défensives",
                "course_type": CourseType.VIDEO,
                "content": {"url": "https://www.youtube.com/embed/8ca4qNI4qYI"},
                "quick_test": [],
            },
            {
                "title": "Construire une attaque",
                "course_type": CourseType.ARTICLE,
                "content": {"body": "Contenu de l'article sur les attaques..."},
                "quick_test": [],
            },
        ],
    },
]

DEMO_LEARNERS = [
    ("Jean", "Dupont", date(1985, 5, 20), "AB123456", UserRole.ARBITRE, "arbitre@ligue.com", True),
    ("Marie", "Curie", date(1990, 11, 15), "CD789012", UserRole.ENTRAINEUR, "entraineur@ligue.com", True),
    ("Sophie", "Bernard", date(1992, 7, 22), "GH901234", UserRole.EMPLOYE, "employe@ligue.com", False),
]


def _questions(rows) -> list[Question]:
    return [
        Question(text=text, options=options, correct_answer_index=answer, order=index)
        for index, (text, options, answer) in enumerate(rows)
    ]


def seed_catalog(db: Session) -> Formation:
    formation = db.query(Formation).filter(Formation.title == DEMO_FORMATION_TITLE).first()
    if formation is not None:
        logger.info("Formation de démonstration déjà présente (id=%s).", formation.id)
        return formation

    formation = Formation(
        title=DEMO_FORMATION_TITLE,
        description="Apprenez les bases de l'arbitrage, des règles du jeu à la gestion de match.",
        image_url="https://images.unsplash.com/photo-1599408998246-e575d2753a22?q=80&w=2070&auto=format&fit=crop",
    )
    for part_order, part_data in enumerate(DEMO_PARTS):
        exam_data = part_data["exam"]
        part = Part(
            title=part_data["title"],
            order=part_order,
            exam=Exam(
                title=exam_data["title"],
                passing_score=exam_data["passing_score"],
                questions=_questions(exam_data["questions"]),
            ),
        )
        for course_order, course_data in enumerate(part_data["courses"]):
            part.courses.append(
                Course(
                    title=course_data["title"],
                    order=course_order,
                    course_type=course_data["course_type"],
                    content=course_data["content"],
                    quick_test_questions=_questions(course_data["quick_test"]),
                )
            )
        formation.parts.append(part)

    db.add(formation)
    db.commit()
    db.refresh(formation)
    logger.info("✅ Formation de démonstration créée (id=%s).", formation.id)
    return formation


def seed_users(db: Session, formation: Formation) -> None:
    if user_crud.get_user_by_email(db, settings.DEFAULT_ADMIN_EMAIL) is None:
        logger.info("Création de l'administrateur par défaut '%s'.", settings.DEFAULT_ADMIN_EMAIL)
        db.add(
            User(
                first_name="Admin",
                last_name="Principal",
                email=settings.DEFAULT_ADMIN_EMAIL,
                role=UserRole.ADMINISTRATEUR,
                hashed_password=get_password_hash(settings.DEFAULT_ADMIN_PASSWORD),
                is_active=True,
                must_change_password=False,
            )
        )

    for first_name, last_name, birth_date, cin, role, email, is_active in DEMO_LEARNERS:
        if user_crud.get_user_by_email(db, email) is not None:
            continue
        learner = User(
            first_name=first_name,
            last_name=last_name,
            birth_date=birth_date,
            cin=cin,
            email=email,
            role=role,
            is_active=is_active,
            must_change_password=True,
            hashed_password=get_password_hash("password"),
        )
        learner.assigned_formations.append(formation)
        db.add(learner)

    db.commit()


def init_db(db: Session) -> None:
    formation = seed_catalog(db)
    seed_users(db, formation)
