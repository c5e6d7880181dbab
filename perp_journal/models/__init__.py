# perp_journal/models/__init__.py
# Central import registry for Alembic

from perp_journal.models.position import PositionRecord  # noqa: F401
from perp_journal.models.fill import Fill  # noqa: F401
