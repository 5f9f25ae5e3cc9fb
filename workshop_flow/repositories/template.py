import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from pydantic import TypeAdapter
from sqlmodel import Session, select

from ..config import settings
from ..domain.models import ChecklistTemplate, Step
from ..exceptions import TemplateNotFoundError
from ..infrastructure.database.tables import ChecklistStepDBModel
from ..infrastructure.database import connection
from ..data.default_templates import DEFAULT_TEMPLATES

logger = logging.getLogger(__name__)

# Parses stored step JSON (including nested options and injected steps).
STEP_ADAPTER = TypeAdapter(Step)


# The Interface
class TemplateRepository(ABC):
    """
    Defines how the application accesses checklist templates.
    Templates are keyed by workshop and template name.
    """

    @abstractmethod
    def get_template(self, workshop_id: str, template_name: str) -> ChecklistTemplate:
        """
        Retrieves a template's steps in execution order.
        Raises TemplateNotFoundError if not found.
        """
        pass


class StaticTemplateRepository(TemplateRepository):
    """
    Get templates from the built-in list in memory, shared by all workshops.
    """

    def __init__(self, templates: Optional[Dict[str, ChecklistTemplate]] = None):
        # Index for O(1) lookup
        self._index: Dict[str, ChecklistTemplate] = (
            DEFAULT_TEMPLATES if templates is None else templates
        )

    def get_template(self, workshop_id: str, template_name: str) -> ChecklistTemplate:
        if template_name not in self._index:
            raise TemplateNotFoundError(workshop_id, template_name)
        return self._index[template_name]


class SqlTemplateRepository(TemplateRepository):
    """
    Reads the active rows of the 'checklist_steps' table, ordered by
    order_index. Workshops without rows for a template fall back to the
    built-in default checklist when enabled.
    """

    def __init__(self, db_engine=None, use_fallback: Optional[bool] = None):
        self.engine = db_engine or connection.engine
        self.use_fallback = (
            settings.USE_FALLBACK_TEMPLATE if use_fallback is None else use_fallback
        )

    def get_template(self, workshop_id: str, template_name: str) -> ChecklistTemplate:
        with Session(self.engine) as db:
            statement = (
                select(ChecklistStepDBModel)
                .where(ChecklistStepDBModel.workshop_id == workshop_id)
                .where(ChecklistStepDBModel.template_name == template_name)
                .where(ChecklistStepDBModel.is_active == True)  # noqa: E712
                .order_by(ChecklistStepDBModel.order_index)
            )
            rows = db.exec(statement).all()

        if rows:
            # Deserialize JSON -> Step dataclasses
            return ChecklistTemplate(
                name=template_name,
                title=rows[0].template_title,
                steps=[STEP_ADAPTER.validate_python(row.step_data) for row in rows],
            )

        if self.use_fallback and settings.DEFAULT_TEMPLATE_NAME in DEFAULT_TEMPLATES:
            logger.warning(
                f"No steps for template '{template_name}' in workshop {workshop_id}, "
                f"using built-in '{settings.DEFAULT_TEMPLATE_NAME}'"
            )
            return DEFAULT_TEMPLATES[settings.DEFAULT_TEMPLATE_NAME]

        raise TemplateNotFoundError(workshop_id, template_name)
