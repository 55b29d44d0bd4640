"""
Seed data for a fresh database.

Default produce catalog and farm doctor problem catalogue.
Seeding is idempotent: rows are matched by name/title and never duplicated.
"""

import logging
from typing import Dict, List

from sqlalchemy.orm import Session

from app.config.settings import settings
from app.models import Category, Problem, ProblemSeverity, Product

logger = logging.getLogger(__name__)


DEFAULT_PRODUCE: List[Dict] = [
    {
        "name": "Organic Spinach",
        "image": "https://images.unsplash.com/photo-1596707328639-5095d2c2c019?q=80&w=1780&auto=format&fit=crop",
        "description": (
            "Freshly harvested, tender leaves. Ready for delivery tomorrow. Perfect for healthy "
            "family meals and restaurant bulk orders. Grown using strict organic farming methods."
        ),
        "price": 150,
        "unit": "bunch",
        "stock_quantity": 50,
    },
    {
        "name": "Sweet Carrots",
        "image": "https://images.unsplash.com/photo-1590747124376-b9ae1188151b?q=80&w=1780&auto=format&fit=crop",
        "description": (
            "Crunchy and naturally sweet. Harvested weekly. Great for juice bars, supermarkets, "
            "and everyday cooking."
        ),
        "price": 120,
        "unit": "kg",
        "stock_quantity": 80,
    },
    {
        "name": "Ripe Tomatoes",
        "image": "https://images.unsplash.com/photo-1629828552631-b66ed6d92631?q=80&w=1780&auto=format&fit=crop",
        "description": (
            "Juicy, rich red tomatoes. Available year-round. Essential for households and an "
            "excellent choice for retailers seeking consistent supply."
        ),
        "price": 200,
        "unit": "kg",
        "stock_quantity": 100,
    },
    {
        "name": "Green Bell Peppers",
        "image": "https://images.unsplash.com/photo-1590001090333-3d0d6110f0f4?q=80&w=1780&auto=format&fit=crop",
        "description": (
            "Crisp and flavorful. Ready for harvest every other day. Ideal for salads, "
            "stir-fries, and any fresh produce section."
        ),
        "price": 180,
        "unit": "piece",
        "stock_quantity": 60,
    },
    {
        "name": "Organic Kale",
        "image": "https://images.unsplash.com/photo-1629828552631-b66ed6d92631?q=80&w=1780&auto=format&fit=crop",
        "description": (
            "Nutrient-rich and fresh. Best ordered in advance for bulk supply. Popular with "
            "health-conscious consumers and specialty grocers."
        ),
        "price": 100,
        "unit": "bunch",
        "stock_quantity": 75,
    },
]


DEFAULT_PROBLEMS: List[Dict] = [
    {
        "title": "Yellowing lower leaves on kale",
        "category": "nutrients",
        "severity": ProblemSeverity.MEDIUM,
        "emoji": "🥬",
        "cause": ["Nitrogen deficiency", "Waterlogged roots"],
        "follow_up": ["Are the new leaves still green?", "When did you last top-dress?"],
        "time_to_fix": "1-2 weeks",
        "difficulty": "Easy",
        "action": [
            "Top-dress with well-rotted manure or CAN",
            "Remove badly yellowed leaves",
            "Check drainage around the bed",
        ],
    },
    {
        "title": "Wilting spinach in the afternoon",
        "category": "watering",
        "severity": ProblemSeverity.LOW,
        "emoji": "💧",
        "cause": ["Irregular watering", "Heat stress"],
        "follow_up": ["Does the crop recover by evening?", "How often do you water?"],
        "time_to_fix": "2-3 days",
        "difficulty": "Easy",
        "action": [
            "Water early in the morning",
            "Mulch to keep soil moisture",
            "Provide light shade during hot spells",
        ],
    },
    {
        "title": "Black rot on cabbage and kale",
        "category": "disease",
        "severity": ProblemSeverity.HIGH,
        "emoji": "🦠",
        "cause": ["Xanthomonas bacteria", "Infected seed or splashing water"],
        "follow_up": ["Are there V-shaped yellow lesions at leaf edges?"],
        "time_to_fix": "2-4 weeks",
        "difficulty": "Hard",
        "action": [
            "Uproot and destroy infected plants",
            "Avoid overhead irrigation",
            "Rotate away from brassicas for two seasons",
        ],
    },
    {
        "title": "Aphid clusters under managu leaves",
        "category": "disease",
        "severity": ProblemSeverity.MEDIUM,
        "emoji": "🐛",
        "cause": ["Aphid infestation", "Low natural predator numbers"],
        "follow_up": ["Are leaves curling or sticky?"],
        "time_to_fix": "1 week",
        "difficulty": "Medium",
        "action": [
            "Spray with a mild soap solution",
            "Encourage ladybirds by reducing broad-spectrum sprays",
            "Use a neem-based insecticide if severe",
        ],
    },
    {
        "title": "Hard, crusted soil after rain",
        "category": "soil",
        "severity": ProblemSeverity.LOW,
        "emoji": "🌱",
        "cause": ["Low organic matter", "Bare soil exposed to heavy rain"],
        "follow_up": ["Do seedlings struggle to emerge?"],
        "time_to_fix": "1 season",
        "difficulty": "Medium",
        "action": [
            "Incorporate compost before planting",
            "Keep the soil covered with mulch",
            "Plant a cover crop between seasons",
        ],
    },
]


class SeedService:
    """Service for loading default catalog data."""

    def __init__(self, db: Session):
        self.db = db

    def seed_categories(self) -> int:
        existing = self.db.query(Category).filter(Category.name == settings.DEFAULT_CATEGORY).first()
        if existing:
            return 0
        self.db.add(Category(name=settings.DEFAULT_CATEGORY))
        self.db.flush()
        return 1

    def seed_products(self) -> int:
        category = self.db.query(Category).filter(Category.name == settings.DEFAULT_CATEGORY).one()

        count = 0
        for item in DEFAULT_PRODUCE:
            existing = self.db.query(Product).filter(Product.name == item["name"]).first()
            if existing:
                continue
            self.db.add(Product(
                name=item["name"],
                description=item["description"],
                price=item["price"],
                image=item["image"],
                unit=item["unit"],
                stock_quantity=item["stock_quantity"],
                in_stock=item["stock_quantity"] > 0,
                category_id=category.id
            ))
            count += 1
        return count

    def seed_problems(self) -> int:
        count = 0
        for item in DEFAULT_PROBLEMS:
            existing = self.db.query(Problem).filter(Problem.title == item["title"]).first()
            if existing:
                continue
            self.db.add(Problem(**item))
            count += 1
        return count

    def seed_all(self) -> Dict[str, int]:
        result = {
            "categories_added": self.seed_categories(),
            "products_added": self.seed_products(),
            "problems_added": self.seed_problems(),
        }
        self.db.commit()
        logger.info("Seed complete: %s", result)
        return result
