"""
Database Seeder.

Run this script to populate the 'checklist_steps' table with the
built-in templates defined in data/default_templates.py for one workshop.

Usage:
    python -m workshop_flow.scripts.db_seed_templates <workshop_id>
"""

import argparse

from fastapi.encoders import jsonable_encoder
from sqlmodel import Session, select

from workshop_flow.data.default_templates import DEFAULT_TEMPLATES
from workshop_flow.infrastructure.database.connection import engine, init_db
from workshop_flow.infrastructure.database.tables import ChecklistStepDBModel


def seed_templates(workshop_id: str, db_engine=None) -> int:
    """Upserts every built-in template step. Returns the number of rows written."""
    db_engine = db_engine or engine
    print("Initializing Database Connection...")

    init_db(db_engine)
    written = 0

    with Session(db_engine) as session:
        print(f"Found {len(DEFAULT_TEMPLATES)} templates to seed.")

        for name, template in DEFAULT_TEMPLATES.items():
            print(f"Processing template: {name}")

            for order_index, step in enumerate(template.steps):
                # Serialize the step (with options and injected steps) to JSON-compatible data.
                step_data = jsonable_encoder(step)

                statement = (
                    select(ChecklistStepDBModel)
                    .where(ChecklistStepDBModel.workshop_id == workshop_id)
                    .where(ChecklistStepDBModel.template_name == name)
                    .where(ChecklistStepDBModel.step_id == step.id)
                )
                existing = session.exec(statement).first()

                if existing:
                    existing.template_title = template.title
                    existing.order_index = order_index
                    existing.step_data = step_data
                    existing.is_active = True
                    session.add(existing)
                else:
                    session.add(
                        ChecklistStepDBModel(
                            workshop_id=workshop_id,
                            template_name=name,
                            template_title=template.title,
                            step_id=step.id,
                            order_index=order_index,
                            step_data=step_data,
                        )
                    )
                written += 1

        session.commit()
        print("Template seeding complete.")
    return written


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed built-in checklist templates.")
    parser.add_argument("workshop_id")
    args = parser.parse_args()
    seed_templates(args.workshop_id)
